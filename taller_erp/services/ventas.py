"""Ventas directas en el local: tela por metro y unidades (clones, vinil...).

La venta y la salida de inventario van en la misma transacción: si la salida
falla no queda venta registrada.
"""
import logging
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from taller_erp.core.errors import NoEncontrado, StockInsuficiente, DestinoIncorrecto, ErrorValidacion
from taller_erp.db import transaccion
from taller_erp.models.inventario import Material, Rollo, TipoMovimiento
from taller_erp.models.pedidos import Ubicacion
from taller_erp.models.ventas import Venta, VentaItem, TipoVenta, MetodoPago
from taller_erp.services import inventario
from taller_erp.services.folios import siguiente_folio_venta, generar_folio_unico
from taller_erp.utils.money import dec, redondear

logger = logging.getLogger(__name__)


def _validar_cantidades(cantidad: Decimal, precio_unitario: Decimal):
    if dec(cantidad) <= 0:
        raise ErrorValidacion("La cantidad debe ser mayor a cero", {"campo": "cantidad"})
    if dec(cantidad) != redondear(cantidad):
        raise ErrorValidacion("La cantidad admite como máximo 2 decimales", {"campo": "cantidad"})
    if dec(precio_unitario) < 0:
        raise ErrorValidacion("El precio unitario no puede ser negativo", {"campo": "precio_unitario"})


def _nueva_venta(
    db: Session,
    tipo_venta: TipoVenta,
    material_id: int,
    rollo_id: int | None,
    cantidad: Decimal,
    precio_unitario: Decimal,
    metodo_pago: MetodoPago,
    ubicacion: Ubicacion,
    cliente_nombre: str | None,
    cliente_telefono: str | None,
    vendedor_id: int | None,
    hoy: date | None,
) -> Venta:
    total = redondear(dec(precio_unitario) * dec(cantidad))
    folio = generar_folio_unico(
        lambda: siguiente_folio_venta(db, hoy),
        lambda f: existe_folio(db, f),
    )
    venta = Venta(
        folio_venta=folio,
        tipo_venta=tipo_venta,
        cliente_nombre=cliente_nombre,
        cliente_telefono=cliente_telefono,
        total=total,
        metodo_pago=metodo_pago,
        usuario_vendedor_id=vendedor_id,
        ubicacion=ubicacion,
        fecha_venta=datetime.now(),
    )
    venta.items.append(VentaItem(
        material_id=material_id,
        rollo_id=rollo_id,
        cantidad=dec(cantidad),
        precio_unitario=redondear(precio_unitario),
        subtotal=total,
    ))
    db.add(venta)
    db.flush()
    return venta


def existe_folio(db: Session, folio: str) -> bool:
    return bool(db.scalar(select(func.count()).select_from(Venta).where(Venta.folio_venta == folio)))


def vender_tela_por_metros(
    db: Session,
    rollo_id: int,
    metros: Decimal,
    precio_unitario: Decimal,
    metodo_pago: MetodoPago,
    ubicacion: Ubicacion,
    cliente_nombre: str | None = None,
    cliente_telefono: str | None = None,
    vendedor_id: int | None = None,
    hoy: date | None = None,
) -> Venta:
    _validar_cantidades(metros, precio_unitario)
    with transaccion(db):
        rollo = db.get(Rollo, rollo_id)
        if rollo is None:
            raise NoEncontrado("Rollo", "id", rollo_id)
        if not rollo.puede_usarse_para_venta:
            raise DestinoIncorrecto(f"El rollo {rollo.codigo_rollo} no está destinado para venta")
        if dec(rollo.metros_actuales) < dec(metros):
            raise StockInsuficiente(rollo.material_id, dec(rollo.metros_actuales), dec(metros))

        venta = _nueva_venta(
            db, TipoVenta.TELA_METROS, rollo.material_id, rollo.id, metros, precio_unitario,
            metodo_pago, ubicacion, cliente_nombre, cliente_telefono, vendedor_id, hoy,
        )
        inventario.retirar_de_rollo(
            db, rollo.id, metros, TipoMovimiento.SALIDA_VENTA,
            f"Venta - Folio: {venta.folio_venta}", None, vendedor_id,
        )
    logger.info("Venta de tela registrada: %s - %s metros - Total: %s", venta.folio_venta, metros, venta.total)
    return venta


def vender_unidades(
    db: Session,
    material_id: int,
    cantidad: Decimal,
    precio_unitario: Decimal,
    metodo_pago: MetodoPago,
    ubicacion: Ubicacion,
    cliente_nombre: str | None = None,
    cliente_telefono: str | None = None,
    vendedor_id: int | None = None,
    tipo_venta: TipoVenta = TipoVenta.CLON,
    hoy: date | None = None,
) -> Venta:
    _validar_cantidades(cantidad, precio_unitario)
    with transaccion(db):
        material = db.get(Material, material_id)
        if material is None:
            raise NoEncontrado("Material", "id", material_id)
        if dec(material.stock_actual) < dec(cantidad):
            raise StockInsuficiente(material.id, dec(material.stock_actual), dec(cantidad))

        venta = _nueva_venta(
            db, tipo_venta, material.id, None, cantidad, precio_unitario,
            metodo_pago, ubicacion, cliente_nombre, cliente_telefono, vendedor_id, hoy,
        )
        motivo = (
            f"Venta de clones - Folio: {venta.folio_venta}"
            if tipo_venta == TipoVenta.CLON
            else f"Venta - Folio: {venta.folio_venta}"
        )
        inventario.aplicar_movimiento(
            db, material.id, None, TipoMovimiento.SALIDA_VENTA, cantidad, motivo, usuario_id=vendedor_id
        )
    logger.info("Venta registrada: %s - %s x%s - Total: %s", venta.folio_venta, tipo_venta.value, cantidad, venta.total)
    return venta


# ========== CONSULTAS ==========
def obtener(db: Session, venta_id: int) -> Venta:
    venta = db.get(Venta, venta_id)
    if venta is None:
        raise NoEncontrado("Venta", "id", venta_id)
    return venta


def listar(db: Session, limite: int = 100, offset: int = 0) -> list[Venta]:
    stmt = select(Venta).order_by(Venta.fecha_venta.desc(), Venta.id.desc()).offset(offset).limit(limite)
    return list(db.execute(stmt).scalars())


def _rango_stmt(inicio: date, fin: date):
    desde = datetime.combine(inicio, time.min)
    hasta = datetime.combine(fin + timedelta(days=1), time.min)
    return select(Venta).where(Venta.fecha_venta >= desde, Venta.fecha_venta < hasta)


def por_rango(db: Session, inicio: date, fin: date) -> list[Venta]:
    """Ventas entre ``inicio`` y ``fin`` incluyendo ambos días completos."""
    if fin < inicio:
        raise ErrorValidacion("La fecha final no puede ser anterior a la inicial")
    stmt = _rango_stmt(inicio, fin).order_by(Venta.fecha_venta.desc(), Venta.id.desc())
    return list(db.execute(stmt).scalars())


def del_dia(db: Session, hoy: date | None = None) -> list[Venta]:
    hoy = hoy or date.today()
    return por_rango(db, hoy, hoy)


def por_ubicacion(db: Session, ubicacion: Ubicacion) -> list[Venta]:
    stmt = select(Venta).where(Venta.ubicacion == ubicacion).order_by(Venta.fecha_venta.desc(), Venta.id.desc())
    return list(db.execute(stmt).scalars())


def totales(db: Session, inicio: date, fin: date) -> dict[str, Any]:
    ventas = por_rango(db, inicio, fin)
    total = sum((dec(v.total) for v in ventas), Decimal("0"))
    return {"total": redondear(total), "cantidad": len(ventas)}
