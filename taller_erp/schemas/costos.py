# schemas/costos.py
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from taller_erp.models.costos import NivelAlerta
from taller_erp.schemas.comun import Dinero


class CostoIn(BaseModel):
    # los negativos se rechazan en el servicio con ErrorValidacion (400)
    pedido_id: int
    costo_tela: Decimal = Decimal("0")
    costo_vinil: Decimal = Decimal("0")
    costo_hilo: Decimal = Decimal("0")
    costo_maquila: Decimal = Decimal("0")
    costo_varios: Decimal = Decimal("0")
    precio_venta: Decimal
    notas: Optional[str] = None


class CostoOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    pedido_id: int
    costo_tela: Dinero
    costo_vinil: Dinero
    costo_hilo: Dinero
    costo_maquila: Dinero
    costo_varios: Dinero
    total_costo: Dinero
    precio_venta: Dinero
    utilidad: Dinero
    margen_porcentaje: Optional[Dinero]
    nivel_alerta: NivelAlerta
    es_rentable: bool
    notas: Optional[str]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]


class ReporteCostosOut(BaseModel):
    fecha_inicio: date
    fecha_fin: date
    total_ventas: Dinero
    total_costos: Dinero
    utilidad_total: Dinero
    margen_promedio: Dinero
    total_pedidos: int
    pedidos_rentables: int
    pedidos_con_perdida_count: int
    pedidos_sin_costos: int
    top_pedidos_rentables: List[CostoOut]
    lista_pedidos_con_perdida: List[CostoOut]
    utilidad_mas_alta: Optional[Dinero]
    perdida_mas_alta: Optional[Dinero]
    margen_mas_alto: Optional[Dinero]
