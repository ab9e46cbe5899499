# taller_erp/utils/money.py
from decimal import Decimal, ROUND_HALF_UP
from typing import Union

Number = Union[int, float, str, Decimal]

CENTAVOS = Decimal("0.01")


def dec(value: Number | None) -> Decimal:
    """None -> 0; floats pasan por str para no arrastrar error binario."""
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def redondear(value: Number | None, exp: Decimal = CENTAVOS) -> Decimal:
    """Redondeo comercial (half-up) a 2 decimales por defecto."""
    return dec(value).quantize(exp, rounding=ROUND_HALF_UP)


def porcentaje(parte: Number | None, total: Number | None) -> Decimal:
    """parte / total * 100 redondeado a 2 decimales; 0 si total es 0."""
    t = dec(total)
    if t == 0:
        return Decimal("0.00")
    return redondear(dec(parte) * 100 / t)
