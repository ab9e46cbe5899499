# schemas/ventas.py
from datetime import datetime
from decimal import Decimal
from typing import Annotated, List, Optional

from pydantic import BaseModel, ConfigDict

from taller_erp.models.pedidos import Ubicacion
from taller_erp.models.ventas import MetodoPago, TipoVenta
from taller_erp.schemas.comun import Dinero, Mayus


class VentaBaseIn(BaseModel):
    precio_unitario: Decimal
    metodo_pago: Annotated[MetodoPago, Mayus] = MetodoPago.EFECTIVO
    ubicacion: Annotated[Ubicacion, Mayus] = Ubicacion.LOCAL
    cliente_nombre: Optional[str] = None
    cliente_telefono: Optional[str] = None


class VentaTelaIn(VentaBaseIn):
    rollo_id: int
    metros: Decimal


class VentaUnidadesIn(VentaBaseIn):
    material_id: int
    cantidad: Decimal
    tipo_venta: Annotated[TipoVenta, Mayus] = TipoVenta.CLON


class VentaItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    material_id: int
    rollo_id: Optional[int]
    cantidad: Dinero
    precio_unitario: Dinero
    subtotal: Dinero


class VentaOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    folio_venta: str
    tipo_venta: TipoVenta
    cliente_nombre: Optional[str]
    cliente_telefono: Optional[str]
    total: Dinero
    metodo_pago: MetodoPago
    usuario_vendedor_id: Optional[int]
    ubicacion: Ubicacion
    fecha_venta: datetime
    items: List[VentaItemOut] = []


class TotalesVentasOut(BaseModel):
    total: Dinero
    cantidad: int
