# schemas/comun.py
from decimal import Decimal
from typing import Annotated, Any

from pydantic import BeforeValidator, PlainSerializer

# Decimal por dentro, número JSON por fuera
Dinero = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


def _mayusculas(v: Any) -> Any:
    return v.strip().upper() if isinstance(v, str) else v


# Enums aceptan "venta", "Venta" o "VENTA"
Mayus = BeforeValidator(_mayusculas)
