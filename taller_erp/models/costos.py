from __future__ import annotations
import enum
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import Text, DateTime, DECIMAL, ForeignKey
from sqlalchemy.orm import relationship, Mapped, mapped_column

from taller_erp.models.base import Base


class NivelAlerta(str, enum.Enum):
    EXCELENTE = "EXCELENTE"  # margen > 25%
    NORMAL = "NORMAL"        # margen 10-25%
    BAJO = "BAJO"            # margen < 10%
    PERDIDA = "PERDIDA"      # utilidad negativa
    SIN_DATOS = "SIN_DATOS"  # sin margen calculado


# Reglas evaluadas en orden; gana la primera que aplica.
REGLAS_NIVEL_ALERTA = (
    (NivelAlerta.PERDIDA, lambda utilidad, margen: utilidad is not None and utilidad < 0),
    (NivelAlerta.SIN_DATOS, lambda utilidad, margen: margen is None),
    (NivelAlerta.EXCELENTE, lambda utilidad, margen: margen > 25),
    (NivelAlerta.NORMAL, lambda utilidad, margen: margen >= 10),
)


def clasificar_nivel_alerta(utilidad: Decimal | None, margen: Decimal | None) -> NivelAlerta:
    for nivel, aplica in REGLAS_NIVEL_ALERTA:
        if aplica(utilidad, margen):
            return nivel
    return NivelAlerta.BAJO


class CostoPedido(Base):
    __tablename__ = "costos_pedido"
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    pedido_id: Mapped[int] = mapped_column(ForeignKey("pedidos.id"), unique=True, nullable=False)

    costo_tela: Mapped[Decimal] = mapped_column(DECIMAL(10, 2), default=Decimal("0"))
    costo_vinil: Mapped[Decimal] = mapped_column(DECIMAL(10, 2), default=Decimal("0"))
    costo_hilo: Mapped[Decimal] = mapped_column(DECIMAL(10, 2), default=Decimal("0"))
    costo_maquila: Mapped[Decimal] = mapped_column(DECIMAL(10, 2), default=Decimal("0"))
    costo_varios: Mapped[Decimal] = mapped_column(DECIMAL(10, 2), default=Decimal("0"))

    # recalculados en cada alta/edición por services.costos.recalcular_totales
    total_costo: Mapped[Decimal] = mapped_column(DECIMAL(10, 2), default=Decimal("0"))
    precio_venta: Mapped[Decimal] = mapped_column(DECIMAL(10, 2), default=Decimal("0"))
    utilidad: Mapped[Decimal] = mapped_column(DECIMAL(10, 2), default=Decimal("0"), index=True)
    margen_porcentaje: Mapped[Optional[Decimal]] = mapped_column(DECIMAL(12, 2), default=Decimal("0"))

    notas: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    pedido = relationship("Pedido")

    @property
    def es_rentable(self) -> bool:
        return self.utilidad is not None and self.utilidad > 0

    @property
    def nivel_alerta(self) -> NivelAlerta:
        return clasificar_nivel_alerta(self.utilidad, self.margen_porcentaje)
