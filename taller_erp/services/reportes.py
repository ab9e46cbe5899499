from datetime import date
from decimal import Decimal
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from taller_erp.core.errors import ErrorValidacion
from taller_erp.models.inventario import Material, TipoMaterial
from taller_erp.models.pedidos import Pedido, EstadoPedido
from taller_erp.models.ventas import TipoVenta
from taller_erp.services import inventario, pedidos, ventas
from taller_erp.utils.money import dec, redondear


def _materiales_con_tipo(db: Session, nombre_tipo: str) -> list[Material]:
    stmt = (
        select(Material)
        .join(TipoMaterial, Material.tipo_material_id == TipoMaterial.id)
        .where(Material.activo.is_(True), TipoMaterial.nombre == nombre_tipo)
    )
    return list(db.execute(stmt).scalars())


def dashboard(db: Session, hoy: date | None = None) -> dict[str, Any]:
    hoy = hoy or date.today()
    alertas = inventario.materiales_con_alerta(db)
    criticos = [m for m in alertas if m.tiene_stock_critico]
    para_hoy = pedidos.para_entregar_hoy(db, hoy)
    ventas_hoy = ventas.del_dia(db, hoy)

    return {
        "materiales_criticos": len(criticos),
        "materiales_en_alerta": len(alertas),
        "alertas": [
            {"id": m.id, "nombre": m.nombre, "stock_actual": m.stock_actual, "nivel": m.nivel_alerta}
            for m in alertas
        ],
        "pedidos_activos": len(pedidos.activos(db)),
        "pedidos_para_hoy": len(para_hoy),
        "pedidos_retrasados": len(pedidos.retrasados(db, hoy)),
        "pedidos_hoy": [
            {"id": p.id, "folio": p.folio, "nombre_pedido": p.nombre_pedido,
             "cliente_nombre": p.cliente_nombre, "estado": p.estado.value}
            for p in para_hoy[:5]
        ],
        "stock_tela_total": redondear(
            sum((dec(m.stock_actual) for m in _materiales_con_tipo(db, "TELA")), Decimal("0"))
        ),
        "rollos_disponibles": len(inventario.rollos_disponibles(db)),
        "ventas_hoy_total": redondear(sum((dec(v.total) for v in ventas_hoy), Decimal("0"))),
        "ventas_hoy_cantidad": len(ventas_hoy),
    }


def reporte_inventario(db: Session) -> dict[str, Any]:
    materiales = inventario.listar_materiales(db)
    valor = sum((dec(m.stock_actual) * dec(m.precio_unitario) for m in materiales), Decimal("0"))
    return {
        "total_materiales": len(materiales),
        "materiales_en_alerta": sum(1 for m in materiales if m.tiene_stock_bajo),
        "materiales_criticos": sum(1 for m in materiales if m.tiene_stock_critico),
        "valor_inventario": redondear(valor),
        "rollos_disponibles": len(inventario.rollos_disponibles(db)),
        "materiales": materiales,
    }


def reporte_pedidos(db: Session, inicio: date, fin: date, hoy: date | None = None) -> dict[str, Any]:
    if fin < inicio:
        raise ErrorValidacion("La fecha final no puede ser anterior a la inicial")
    hoy = hoy or date.today()
    lista = list(db.execute(
        select(Pedido)
        .where(Pedido.fecha_pedido >= inicio, Pedido.fecha_pedido <= fin)
        .order_by(Pedido.fecha_pedido, Pedido.id)
    ).scalars())
    por_estado = {e.value: 0 for e in EstadoPedido}
    for p in lista:
        por_estado[p.estado.value] += 1
    return {
        "fecha_inicio": inicio,
        "fecha_fin": fin,
        "total_pedidos": len(lista),
        "total_piezas": sum(p.total_piezas or 0 for p in lista),
        "por_estado": por_estado,
        "entregados": por_estado[EstadoPedido.ENTREGADO.value],
        "cancelados": por_estado[EstadoPedido.CANCELADO.value],
        "retrasados": sum(1 for p in lista if p.esta_retrasado(hoy)),
        "pedidos": lista,
    }


def reporte_ventas(db: Session, inicio: date, fin: date) -> dict[str, Any]:
    lista = ventas.por_rango(db, inicio, fin)
    total = sum((dec(v.total) for v in lista), Decimal("0"))
    por_tipo = {t.value: Decimal("0") for t in TipoVenta}
    for v in lista:
        por_tipo[v.tipo_venta.value] += dec(v.total)
    return {
        "fecha_inicio": inicio,
        "fecha_fin": fin,
        "total_ventas": redondear(total),
        "cantidad_ventas": len(lista),
        "promedio_venta": redondear(total / len(lista)) if lista else Decimal("0.00"),
        "por_tipo": {k: redondear(v) for k, v in por_tipo.items()},
        "ventas": lista,
    }
