# schemas/pedidos.py
from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from taller_erp.models.pedidos import EstadoPedido, Prioridad, TipoImagen, TipoPedido, Ubicacion
from taller_erp.schemas.comun import Dinero, Mayus


# ---------- Productos ----------
class ProductoIn(BaseModel):
    nombre: str = Field(min_length=1, max_length=100)
    consumo_base_metros: Decimal
    incluye_mangas: bool = False
    consumo_mangas_metros: Optional[Decimal] = None
    incluye_otro: bool = False
    consumo_otro_metros: Optional[Decimal] = None
    descripcion_otro: Optional[str] = None
    ajustes_talla: Optional[Dict[str, Decimal]] = None  # {"XL": 0.15, "6": -0.2}


class AjusteTallaOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    talla: str
    ajuste_metros: Dinero


class ProductoOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    nombre: str
    consumo_base_metros: Dinero
    incluye_mangas: bool
    consumo_mangas_metros: Optional[Dinero]
    incluye_otro: bool
    consumo_otro_metros: Optional[Dinero]
    descripcion_otro: Optional[str]
    activo: bool
    ajustes_talla: List[AjusteTallaOut] = []


class ConsumoIn(BaseModel):
    cantidades: Dict[str, int]  # {"M": 10, "L": 5}


class ConsumoTallaOut(BaseModel):
    por_pieza: Dinero
    piezas: int
    subtotal: Dinero


class ConsumoOut(BaseModel):
    producto_id: int
    total_piezas: int
    total_metros: Dinero
    detalle: Dict[str, ConsumoTallaOut]


# ---------- Pedidos ----------
class PedidoItemIn(BaseModel):
    talla: str = Field(min_length=1, max_length=10)
    nombre_jugador: Optional[str] = None
    numero_espalda: Optional[str] = None
    color_especial: Optional[str] = None
    color_hex_especial: Optional[str] = None
    tiene_color_especial: bool = False


class PedidoCreate(BaseModel):
    nombre_pedido: str = Field(min_length=1, max_length=200)
    cliente_nombre: str = Field(min_length=1, max_length=100)
    cliente_telefono: Optional[str] = None
    cliente_email: Optional[str] = None
    fecha_pedido: Optional[date] = None
    fecha_entrega: date
    prioridad: Annotated[Prioridad, Mayus] = Prioridad.ESTANDAR
    tipo: Annotated[TipoPedido, Mayus] = TipoPedido.SENCILLO
    producto_id: Optional[int] = None
    color_principal: Optional[str] = None
    color_hex_principal: Optional[str] = None
    observaciones: Optional[str] = None
    ubicacion_origen: Optional[Annotated[Ubicacion, Mayus]] = None
    items: List[PedidoItemIn] = []


class PedidoUpdate(BaseModel):
    nombre_pedido: Optional[str] = None
    cliente_nombre: Optional[str] = None
    cliente_telefono: Optional[str] = None
    cliente_email: Optional[str] = None
    fecha_entrega: Optional[date] = None
    prioridad: Optional[Annotated[Prioridad, Mayus]] = None
    tipo: Optional[Annotated[TipoPedido, Mayus]] = None
    color_principal: Optional[str] = None
    color_hex_principal: Optional[str] = None
    observaciones: Optional[str] = None
    ubicacion_origen: Optional[Annotated[Ubicacion, Mayus]] = None


class EstadoIn(BaseModel):
    estado: Annotated[EstadoPedido, Mayus]


class CancelarIn(BaseModel):
    motivo: str = Field(min_length=1)


class PedidoItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    talla: str
    nombre_jugador: Optional[str]
    numero_espalda: Optional[str]
    color_especial: Optional[str]
    color_hex_especial: Optional[str]
    tiene_color_especial: bool
    orden_talla: Optional[int]


class PedidoOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    folio: str
    nombre_pedido: str
    cliente_nombre: str
    cliente_telefono: Optional[str]
    cliente_email: Optional[str]
    fecha_pedido: date
    fecha_entrega: date
    prioridad: Prioridad
    tipo: TipoPedido
    producto_id: Optional[int]
    color_principal: Optional[str]
    color_hex_principal: Optional[str]
    total_piezas: int
    total_tela_estimada: Optional[Dinero]
    observaciones: Optional[str]
    estado: EstadoPedido
    usuario_creador_id: Optional[int]
    ubicacion_origen: Optional[Ubicacion]
    esta_activo: bool
    items: List[PedidoItemOut] = []


class PedidoResumen(BaseModel):
    id: int
    folio: str
    nombre_pedido: str
    cliente_nombre: str
    estado: str


class PedidoStatsOut(BaseModel):
    total: int
    por_estado: Dict[str, int]
    activos: int
    retrasados: int
    para_hoy: int
    preferenciales: int


# ---------- Imágenes ----------
class ImagenIn(BaseModel):
    url: str = Field(min_length=1, max_length=500)
    nombre_archivo: Optional[str] = None
    public_id: Optional[str] = None
    tipo: Annotated[TipoImagen, Mayus] = TipoImagen.DISENO_FINAL
    descripcion: Optional[str] = None
    es_principal: bool = False


class ImagenOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    pedido_id: int
    nombre_archivo: str
    url: str
    public_id: Optional[str]
    tipo: TipoImagen
    descripcion: Optional[str]
    es_principal: bool
    uploaded_at: datetime
