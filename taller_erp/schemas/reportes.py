# schemas/reportes.py
from datetime import date
from typing import Dict, List

from pydantic import BaseModel

from taller_erp.schemas.comun import Dinero
from taller_erp.schemas.inventario import MaterialOut
from taller_erp.schemas.pedidos import PedidoOut, PedidoResumen
from taller_erp.schemas.ventas import VentaOut


class AlertaMaterial(BaseModel):
    id: int
    nombre: str
    stock_actual: Dinero
    nivel: str


class DashboardOut(BaseModel):
    materiales_criticos: int
    materiales_en_alerta: int
    alertas: List[AlertaMaterial]
    pedidos_activos: int
    pedidos_para_hoy: int
    pedidos_retrasados: int
    pedidos_hoy: List[PedidoResumen]
    stock_tela_total: Dinero
    rollos_disponibles: int
    ventas_hoy_total: Dinero
    ventas_hoy_cantidad: int


class ReporteInventarioOut(BaseModel):
    total_materiales: int
    materiales_en_alerta: int
    materiales_criticos: int
    valor_inventario: Dinero
    rollos_disponibles: int
    materiales: List[MaterialOut]


class ReportePedidosOut(BaseModel):
    fecha_inicio: date
    fecha_fin: date
    total_pedidos: int
    total_piezas: int
    por_estado: Dict[str, int]
    entregados: int
    cancelados: int
    retrasados: int
    pedidos: List[PedidoOut]


class ReporteVentasOut(BaseModel):
    fecha_inicio: date
    fecha_fin: date
    total_ventas: Dinero
    cantidad_ventas: int
    promedio_venta: Dinero
    por_tipo: Dict[str, Dinero]
    ventas: List[VentaOut]
