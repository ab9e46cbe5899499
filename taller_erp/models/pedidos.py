from __future__ import annotations
import enum
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import (
    String, Text, Integer, Boolean, Enum, Date, DateTime, DECIMAL, ForeignKey, UniqueConstraint
)
from sqlalchemy.orm import relationship, Mapped, mapped_column

from taller_erp.models.base import Base


# ---------- Plantillas de producto ----------
class Producto(Base):
    __tablename__ = "productos"
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    nombre: Mapped[str] = mapped_column(String(100), nullable=False)
    consumo_base_metros: Mapped[Decimal] = mapped_column(DECIMAL(6, 2), nullable=False)
    incluye_mangas: Mapped[bool] = mapped_column(Boolean, default=False)
    consumo_mangas_metros: Mapped[Optional[Decimal]] = mapped_column(DECIMAL(6, 2))
    incluye_otro: Mapped[bool] = mapped_column(Boolean, default=False)
    consumo_otro_metros: Mapped[Optional[Decimal]] = mapped_column(DECIMAL(6, 2))
    descripcion_otro: Mapped[Optional[str]] = mapped_column(String(100))
    activo: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    ajustes_talla: Mapped[List["ProductoAjusteTalla"]] = relationship(
        back_populates="producto", cascade="all, delete-orphan", lazy="selectin"
    )


class ProductoAjusteTalla(Base):
    __tablename__ = "producto_ajustes_talla"
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    producto_id: Mapped[int] = mapped_column(ForeignKey("productos.id"), nullable=False)
    talla: Mapped[str] = mapped_column(String(10), nullable=False)
    ajuste_metros: Mapped[Decimal] = mapped_column(DECIMAL(6, 2), default=Decimal("0"), nullable=False)

    producto: Mapped["Producto"] = relationship(back_populates="ajustes_talla")
    __table_args__ = (UniqueConstraint("producto_id", "talla", name="uq_ajuste_producto_talla"),)


# ---------- Pedidos ----------
class Prioridad(str, enum.Enum):
    ESTANDAR = "ESTANDAR"
    PREFERENCIAL = "PREFERENCIAL"


class TipoPedido(str, enum.Enum):
    SENCILLO = "SENCILLO"
    DOBLE = "DOBLE"


class EstadoPedido(str, enum.Enum):
    PENDIENTE = "PENDIENTE"
    EN_CORTE = "EN_CORTE"
    EN_COSTURA = "EN_COSTURA"
    EN_ACABADOS = "EN_ACABADOS"
    LISTO = "LISTO"
    ENTREGADO = "ENTREGADO"
    CANCELADO = "CANCELADO"


ESTADOS_CERRADOS = (EstadoPedido.ENTREGADO, EstadoPedido.CANCELADO)


class Ubicacion(str, enum.Enum):
    TALLER = "TALLER"
    LOCAL = "LOCAL"


class Pedido(Base):
    __tablename__ = "pedidos"
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    folio: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    nombre_pedido: Mapped[str] = mapped_column(String(200), nullable=False)
    cliente_nombre: Mapped[str] = mapped_column(String(100), nullable=False)
    cliente_telefono: Mapped[Optional[str]] = mapped_column(String(20))
    cliente_email: Mapped[Optional[str]] = mapped_column(String(100))

    fecha_pedido: Mapped[date] = mapped_column(Date, nullable=False, default=date.today, index=True)
    fecha_entrega: Mapped[date] = mapped_column(Date, nullable=False, index=True)

    prioridad: Mapped[Prioridad] = mapped_column(Enum(Prioridad), default=Prioridad.ESTANDAR)
    tipo: Mapped[TipoPedido] = mapped_column(Enum(TipoPedido), default=TipoPedido.SENCILLO)

    producto_id: Mapped[Optional[int]] = mapped_column(ForeignKey("productos.id"))
    color_principal: Mapped[Optional[str]] = mapped_column(String(50))
    color_hex_principal: Mapped[Optional[str]] = mapped_column(String(7))

    total_piezas: Mapped[int] = mapped_column(Integer, default=0)
    total_tela_estimada: Mapped[Optional[Decimal]] = mapped_column(DECIMAL(10, 2))
    observaciones: Mapped[Optional[str]] = mapped_column(Text)

    estado: Mapped[EstadoPedido] = mapped_column(Enum(EstadoPedido), default=EstadoPedido.PENDIENTE, index=True)
    usuario_creador_id: Mapped[Optional[int]] = mapped_column(ForeignKey("usuarios.id"))
    ubicacion_origen: Mapped[Optional[Ubicacion]] = mapped_column(Enum(Ubicacion))

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    producto = relationship("Producto")
    usuario_creador = relationship("Usuario")
    items: Mapped[List["PedidoItem"]] = relationship(
        back_populates="pedido", cascade="all, delete-orphan", order_by="PedidoItem.orden_talla"
    )
    imagenes: Mapped[List["PedidoImagen"]] = relationship(
        back_populates="pedido", cascade="all, delete-orphan"
    )

    @property
    def esta_activo(self) -> bool:
        return self.estado not in ESTADOS_CERRADOS

    def esta_retrasado(self, hoy: date | None = None) -> bool:
        hoy = hoy or date.today()
        return self.esta_activo and self.fecha_entrega < hoy


class PedidoItem(Base):
    __tablename__ = "pedido_items"
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    pedido_id: Mapped[int] = mapped_column(ForeignKey("pedidos.id"), nullable=False)
    talla: Mapped[str] = mapped_column(String(10), nullable=False)
    nombre_jugador: Mapped[Optional[str]] = mapped_column(String(100))
    numero_espalda: Mapped[Optional[str]] = mapped_column(String(10))
    color_especial: Mapped[Optional[str]] = mapped_column(String(50))
    color_hex_especial: Mapped[Optional[str]] = mapped_column(String(7))
    tiene_color_especial: Mapped[bool] = mapped_column(Boolean, default=False)
    orden_talla: Mapped[Optional[int]] = mapped_column(Integer)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    pedido: Mapped["Pedido"] = relationship(back_populates="items")


class TipoImagen(str, enum.Enum):
    DISENO_FINAL = "DISENO_FINAL"
    LOGO = "LOGO"
    REFERENCIA = "REFERENCIA"
    OTRO = "OTRO"


class PedidoImagen(Base):
    __tablename__ = "pedido_imagenes"
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    pedido_id: Mapped[int] = mapped_column(ForeignKey("pedidos.id"), nullable=False)
    nombre_archivo: Mapped[str] = mapped_column(String(255), nullable=False)
    url: Mapped[str] = mapped_column(String(500), nullable=False)
    public_id: Mapped[Optional[str]] = mapped_column(String(200))
    tipo: Mapped[TipoImagen] = mapped_column(Enum(TipoImagen), default=TipoImagen.DISENO_FINAL)
    descripcion: Mapped[Optional[str]] = mapped_column(Text)
    es_principal: Mapped[bool] = mapped_column(Boolean, default=False)
    uploaded_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    pedido: Mapped["Pedido"] = relationship(back_populates="imagenes")
