# schemas/inventario.py
from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field

from taller_erp.models.inventario import Destino, PrioridadMaterial, TipoMovimiento, UnidadMedida
from taller_erp.schemas.comun import Dinero, Mayus


class TipoMaterialOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    nombre: str
    descripcion: Optional[str] = None
    unidad_medida: Optional[UnidadMedida] = None


class MaterialCreate(BaseModel):
    tipo_material_id: Optional[int] = None
    nombre: str = Field(min_length=1, max_length=100)
    color: Optional[str] = None
    talla: Optional[str] = None
    stock_inicial: Decimal = Field(default=Decimal("0"), ge=0)
    stock_minimo: Decimal = Field(default=Decimal("0"), ge=0)
    stock_critico: Decimal = Field(default=Decimal("0"), ge=0)
    prioridad: Optional[Annotated[PrioridadMaterial, Mayus]] = None
    precio_unitario: Optional[Decimal] = Field(default=None, ge=0)


class MaterialUpdate(BaseModel):
    tipo_material_id: Optional[int] = None
    nombre: Optional[str] = Field(default=None, min_length=1, max_length=100)
    color: Optional[str] = None
    talla: Optional[str] = None
    stock_minimo: Optional[Decimal] = Field(default=None, ge=0)
    stock_critico: Optional[Decimal] = Field(default=None, ge=0)
    prioridad: Optional[Annotated[PrioridadMaterial, Mayus]] = None
    precio_unitario: Optional[Decimal] = Field(default=None, ge=0)
    activo: Optional[bool] = None


class MaterialOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    tipo_material_id: Optional[int]
    nombre: str
    color: Optional[str]
    talla: Optional[str]
    stock_actual: Dinero
    stock_minimo: Dinero
    stock_critico: Dinero
    prioridad: Optional[PrioridadMaterial]
    precio_unitario: Optional[Dinero]
    activo: bool
    nivel_alerta: str
    version: int


class RolloCreate(BaseModel):
    material_id: int
    codigo_rollo: str = Field(min_length=1, max_length=50)
    metros_iniciales: Decimal = Field(gt=0)
    destino: Annotated[Destino, Mayus]
    fecha_entrada: Optional[date] = None
    proveedor: Optional[str] = None
    precio_compra: Optional[Decimal] = Field(default=None, ge=0)


class RolloOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    material_id: int
    codigo_rollo: str
    metros_iniciales: Dinero
    metros_actuales: Dinero
    destino: Destino
    fecha_entrada: date
    proveedor: Optional[str]
    precio_compra: Optional[Dinero]
    activo: bool
    porcentaje_restante: Dinero
    esta_vacio: bool


class MovimientoCreate(BaseModel):
    material_id: int
    rollo_id: Optional[int] = None
    tipo_movimiento: Annotated[TipoMovimiento, Mayus]
    # AJUSTE admite negativo; el resto debe ser > 0
    cantidad: Decimal
    motivo: Optional[str] = None
    pedido_id: Optional[int] = None


class SalidaCorteIn(BaseModel):
    rollo_id: int
    metros: Decimal
    pedido_id: Optional[int] = None


class SalidaVentaIn(BaseModel):
    rollo_id: int
    metros: Decimal
    motivo: str = "Venta directa"


class MovimientoOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    material_id: int
    rollo_id: Optional[int]
    tipo_movimiento: TipoMovimiento
    cantidad: Dinero
    stock_anterior: Dinero
    stock_nuevo: Dinero
    motivo: Optional[str]
    pedido_id: Optional[int]
    usuario_id: Optional[int]
    fecha: datetime
