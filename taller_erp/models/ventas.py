from __future__ import annotations
import enum
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import String, Enum, DateTime, DECIMAL, ForeignKey
from sqlalchemy.orm import relationship, Mapped, mapped_column

from taller_erp.models.base import Base
from taller_erp.models.pedidos import Ubicacion


class TipoVenta(str, enum.Enum):
    CLON = "CLON"
    TELA_METROS = "TELA_METROS"
    VINIL = "VINIL"
    OTRO = "OTRO"


class MetodoPago(str, enum.Enum):
    EFECTIVO = "EFECTIVO"
    TARJETA = "TARJETA"
    TRANSFERENCIA = "TRANSFERENCIA"


class Venta(Base):
    __tablename__ = "ventas"
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    folio_venta: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    tipo_venta: Mapped[TipoVenta] = mapped_column(Enum(TipoVenta), nullable=False)
    cliente_nombre: Mapped[Optional[str]] = mapped_column(String(100))
    cliente_telefono: Mapped[Optional[str]] = mapped_column(String(20))
    total: Mapped[Decimal] = mapped_column(DECIMAL(12, 2), nullable=False)
    metodo_pago: Mapped[MetodoPago] = mapped_column(Enum(MetodoPago), nullable=False)
    usuario_vendedor_id: Mapped[Optional[int]] = mapped_column(ForeignKey("usuarios.id"))
    ubicacion: Mapped[Ubicacion] = mapped_column(Enum(Ubicacion), nullable=False)
    fecha_venta: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, index=True)

    usuario_vendedor = relationship("Usuario")
    items: Mapped[List["VentaItem"]] = relationship(
        back_populates="venta", cascade="all, delete-orphan"
    )


class VentaItem(Base):
    __tablename__ = "venta_items"
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    venta_id: Mapped[int] = mapped_column(ForeignKey("ventas.id"), nullable=False)
    material_id: Mapped[int] = mapped_column(ForeignKey("materiales.id"), nullable=False)
    rollo_id: Mapped[Optional[int]] = mapped_column(ForeignKey("rollos.id"))
    cantidad: Mapped[Decimal] = mapped_column(DECIMAL(10, 2), nullable=False)
    precio_unitario: Mapped[Decimal] = mapped_column(DECIMAL(10, 2), nullable=False)
    subtotal: Mapped[Decimal] = mapped_column(DECIMAL(12, 2), nullable=False)

    venta: Mapped["Venta"] = relationship(back_populates="items")
    material = relationship("Material")
