import logging
from datetime import date
from decimal import Decimal
from typing import Any

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from taller_erp.core.errors import NoEncontrado, ErrorValidacion
from taller_erp.db import transaccion
from taller_erp.models.costos import CostoPedido
from taller_erp.models.pedidos import Pedido
from taller_erp.utils.money import dec, redondear

logger = logging.getLogger(__name__)

COMPONENTES = ("costo_tela", "costo_vinil", "costo_hilo", "costo_maquila", "costo_varios")


def recalcular_totales(costo: CostoPedido) -> CostoPedido:
    """total_costo, utilidad y margen a partir de los componentes y el precio.

    Se llama en cada alta y en cada edición, sin importar qué campo cambió.
    Con precio de venta 0 el margen queda en 0 (no ausente).
    """
    total = sum((dec(getattr(costo, c)) for c in COMPONENTES), Decimal("0"))
    precio = dec(costo.precio_venta)
    costo.total_costo = redondear(total)
    costo.utilidad = redondear(precio - total)
    if precio == 0:
        costo.margen_porcentaje = Decimal("0.00")
    else:
        costo.margen_porcentaje = redondear((precio - total) * 100 / precio)
    return costo


def registrar_costos(
    db: Session,
    pedido_id: int,
    costos: dict[str, Any],
    precio_venta: Decimal,
    notas: str | None = None,
) -> CostoPedido:
    """Alta o edición del costo (uno a uno con el pedido)."""
    for campo in COMPONENTES:
        if dec(costos.get(campo)) < 0:
            raise ErrorValidacion(f"{campo} no puede ser negativo", {"campo": campo})
    if dec(precio_venta) < 0:
        raise ErrorValidacion("precio_venta no puede ser negativo", {"campo": "precio_venta"})

    with transaccion(db):
        if db.get(Pedido, pedido_id) is None:
            raise NoEncontrado("Pedido", "id", pedido_id)
        costo = db.execute(
            select(CostoPedido).where(CostoPedido.pedido_id == pedido_id)
        ).scalar_one_or_none()
        if costo is None:
            costo = CostoPedido(pedido_id=pedido_id)
            db.add(costo)

        for campo in COMPONENTES:
            setattr(costo, campo, redondear(costos.get(campo)))
        costo.precio_venta = redondear(precio_venta)
        costo.notas = notas
        recalcular_totales(costo)
        db.flush()

    logger.info(
        "Costos guardados para pedido %s - Utilidad: %s - Margen: %s%%",
        pedido_id, costo.utilidad, costo.margen_porcentaje,
    )
    return costo


def obtener_por_pedido(db: Session, pedido_id: int) -> CostoPedido:
    costo = db.execute(
        select(CostoPedido).where(CostoPedido.pedido_id == pedido_id)
    ).scalar_one_or_none()
    if costo is None:
        raise NoEncontrado("CostoPedido", "pedidoId", pedido_id)
    return costo


def tiene_costos(db: Session, pedido_id: int) -> bool:
    return bool(db.scalar(
        select(func.count()).select_from(CostoPedido).where(CostoPedido.pedido_id == pedido_id)
    ))


def listar(db: Session, limite: int = 100, offset: int = 0) -> list[CostoPedido]:
    stmt = (
        select(CostoPedido)
        .order_by(CostoPedido.created_at.desc(), CostoPedido.id.desc())
        .offset(offset)
        .limit(limite)
    )
    return list(db.execute(stmt).scalars())


def eliminar(db: Session, costo_id: int) -> None:
    with transaccion(db):
        costo = db.get(CostoPedido, costo_id)
        if costo is None:
            raise NoEncontrado("CostoPedido", "id", costo_id)
        db.delete(costo)
    logger.info("Costo %s eliminado", costo_id)


def pedidos_con_perdida(db: Session) -> list[CostoPedido]:
    """Utilidad negativa, la peor primero."""
    stmt = (
        select(CostoPedido)
        .where(CostoPedido.utilidad < 0)
        .order_by(CostoPedido.utilidad.asc(), CostoPedido.id)
    )
    return list(db.execute(stmt).scalars())


def pedidos_mas_rentables(db: Session, limite: int = 10) -> list[CostoPedido]:
    stmt = (
        select(CostoPedido)
        .where(CostoPedido.utilidad > 0)
        .order_by(CostoPedido.margen_porcentaje.desc(), CostoPedido.id)
        .limit(limite)
    )
    return list(db.execute(stmt).scalars())


def reporte_periodo(db: Session, inicio: date, fin: date) -> dict[str, Any]:
    """Agregados de rentabilidad para pedidos creados entre ``inicio`` y ``fin`` (inclusive)."""
    if fin < inicio:
        raise ErrorValidacion("La fecha final no puede ser anterior a la inicial")

    en_rango = (Pedido.fecha_pedido >= inicio, Pedido.fecha_pedido <= fin)
    costos = list(db.execute(
        select(CostoPedido).join(Pedido, CostoPedido.pedido_id == Pedido.id).where(*en_rango)
    ).scalars())
    total_pedidos = db.scalar(select(func.count()).select_from(Pedido).where(*en_rango)) or 0

    total_ventas = sum((dec(c.precio_venta) for c in costos), Decimal("0"))
    total_costos = sum((dec(c.total_costo) for c in costos), Decimal("0"))
    utilidad_total = sum((dec(c.utilidad) for c in costos), Decimal("0"))
    margenes = [dec(c.margen_porcentaje) for c in costos if c.margen_porcentaje is not None]
    margen_promedio = redondear(sum(margenes, Decimal("0")) / len(margenes)) if margenes else Decimal("0.00")

    rentables = sorted(
        (c for c in costos if c.es_rentable),
        key=lambda c: dec(c.margen_porcentaje),
        reverse=True,
    )
    con_perdida = sorted((c for c in costos if dec(c.utilidad) < 0), key=lambda c: dec(c.utilidad))

    return {
        "fecha_inicio": inicio,
        "fecha_fin": fin,
        "total_ventas": redondear(total_ventas),
        "total_costos": redondear(total_costos),
        "utilidad_total": redondear(utilidad_total),
        "margen_promedio": margen_promedio,
        "total_pedidos": total_pedidos,
        "pedidos_rentables": len(rentables),
        "pedidos_con_perdida_count": len(con_perdida),
        "pedidos_sin_costos": total_pedidos - len(costos),
        "top_pedidos_rentables": rentables[:10],
        "lista_pedidos_con_perdida": con_perdida,
        "utilidad_mas_alta": max((dec(c.utilidad) for c in costos), default=None),
        "perdida_mas_alta": con_perdida[0].utilidad if con_perdida else None,
        "margen_mas_alto": max(margenes, default=None),
    }
