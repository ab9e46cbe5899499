from __future__ import annotations
import enum
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import (
    String, Text, Integer, BigInteger, Boolean, Enum, Date, DateTime, DECIMAL, ForeignKey
)
from sqlalchemy.orm import relationship, Mapped, mapped_column

from taller_erp.models.base import Base
from taller_erp.utils.money import porcentaje


# ---------- Tablas maestras ----------
class UnidadMedida(str, enum.Enum):
    METROS = "METROS"
    PIEZAS = "PIEZAS"
    KILOS = "KILOS"
    CONOS = "CONOS"


class TipoMaterial(Base):
    __tablename__ = "tipos_material"
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    nombre: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)  # TELA, VINIL, HILO, CLON...
    descripcion: Mapped[Optional[str]] = mapped_column(Text)
    unidad_medida: Mapped[UnidadMedida] = mapped_column(Enum(UnidadMedida), default=UnidadMedida.METROS)


class PrioridadMaterial(str, enum.Enum):
    ALTA = "ALTA"
    MEDIA = "MEDIA"
    BAJA = "BAJA"


class Material(Base):
    __tablename__ = "materiales"
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    tipo_material_id: Mapped[Optional[int]] = mapped_column(ForeignKey("tipos_material.id"))
    nombre: Mapped[str] = mapped_column(String(100), nullable=False)
    color: Mapped[Optional[str]] = mapped_column(String(50))
    talla: Mapped[Optional[str]] = mapped_column(String(10))

    stock_actual: Mapped[Decimal] = mapped_column(DECIMAL(12, 2), default=Decimal("0"), nullable=False)
    stock_minimo: Mapped[Decimal] = mapped_column(DECIMAL(12, 2), default=Decimal("0"), nullable=False)
    stock_critico: Mapped[Decimal] = mapped_column(DECIMAL(12, 2), default=Decimal("0"), nullable=False)

    prioridad: Mapped[Optional[PrioridadMaterial]] = mapped_column(Enum(PrioridadMaterial))
    precio_unitario: Mapped[Optional[Decimal]] = mapped_column(DECIMAL(12, 2))
    activo: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # bloqueo optimista: cada UPDATE verifica y avanza la versión
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    tipo_material = relationship("TipoMaterial")
    rollos: Mapped[List["Rollo"]] = relationship(back_populates="material")

    __mapper_args__ = {"version_id_col": version}

    @property
    def nivel_alerta(self) -> str:
        if self.stock_actual <= self.stock_critico:
            return "CRITICO"
        if self.stock_actual <= self.stock_minimo:
            return "BAJO"
        return "NORMAL"

    @property
    def tiene_stock_bajo(self) -> bool:
        return self.stock_actual <= self.stock_minimo

    @property
    def tiene_stock_critico(self) -> bool:
        return self.stock_actual <= self.stock_critico


# ---------- Rollos ----------
class Destino(str, enum.Enum):
    CORTE = "CORTE"   # solo producción
    VENTA = "VENTA"   # solo venta directa
    MIXTO = "MIXTO"   # ambos


class Rollo(Base):
    __tablename__ = "rollos"
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    material_id: Mapped[int] = mapped_column(ForeignKey("materiales.id"), nullable=False)
    codigo_rollo: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    metros_iniciales: Mapped[Decimal] = mapped_column(DECIMAL(10, 2), nullable=False)
    metros_actuales: Mapped[Decimal] = mapped_column(DECIMAL(10, 2), nullable=False, default=Decimal("0"))
    destino: Mapped[Destino] = mapped_column(Enum(Destino), nullable=False)
    fecha_entrada: Mapped[date] = mapped_column(Date, nullable=False, default=date.today)
    proveedor: Mapped[Optional[str]] = mapped_column(String(100))
    precio_compra: Mapped[Optional[Decimal]] = mapped_column(DECIMAL(10, 2))
    activo: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    material: Mapped["Material"] = relationship(back_populates="rollos")

    __mapper_args__ = {"version_id_col": version}

    @property
    def porcentaje_restante(self) -> Decimal:
        return porcentaje(self.metros_actuales, self.metros_iniciales)

    @property
    def esta_vacio(self) -> bool:
        return self.metros_actuales <= 0

    @property
    def puede_usarse_para_corte(self) -> bool:
        return self.destino in (Destino.CORTE, Destino.MIXTO)

    @property
    def puede_usarse_para_venta(self) -> bool:
        return self.destino in (Destino.VENTA, Destino.MIXTO)


# ---------- Movimientos ----------
class TipoMovimiento(str, enum.Enum):
    ENTRADA = "ENTRADA"            # compra de material nuevo
    SALIDA_CORTE = "SALIDA_CORTE"  # salida para cortar pedido
    SALIDA_VENTA = "SALIDA_VENTA"  # venta directa
    AJUSTE = "AJUSTE"              # ajuste manual, signo lo define quien llama
    MERMA = "MERMA"                # pérdida de material


class MovimientoInventario(Base):
    """Registro inmutable: se inserta una vez por cambio de stock y nunca se edita."""
    __tablename__ = "movimientos_inventario"
    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    material_id: Mapped[int] = mapped_column(ForeignKey("materiales.id"), nullable=False, index=True)
    rollo_id: Mapped[Optional[int]] = mapped_column(ForeignKey("rollos.id"))
    tipo_movimiento: Mapped[TipoMovimiento] = mapped_column(Enum(TipoMovimiento), nullable=False)
    cantidad: Mapped[Decimal] = mapped_column(DECIMAL(12, 2), nullable=False)
    stock_anterior: Mapped[Decimal] = mapped_column(DECIMAL(12, 2), nullable=False)
    stock_nuevo: Mapped[Decimal] = mapped_column(DECIMAL(12, 2), nullable=False)
    motivo: Mapped[Optional[str]] = mapped_column(Text)
    pedido_id: Mapped[Optional[int]] = mapped_column(ForeignKey("pedidos.id"))
    usuario_id: Mapped[Optional[int]] = mapped_column(ForeignKey("usuarios.id"))
    fecha: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, index=True)

    material = relationship("Material")
    rollo = relationship("Rollo")
    usuario = relationship("Usuario")

    @property
    def es_entrada(self) -> bool:
        return self.tipo_movimiento == TipoMovimiento.ENTRADA

    @property
    def es_salida(self) -> bool:
        return self.tipo_movimiento in (TipoMovimiento.SALIDA_CORTE, TipoMovimiento.SALIDA_VENTA)
