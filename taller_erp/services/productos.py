import logging
from decimal import Decimal
from typing import Any, Mapping

from sqlalchemy import select
from sqlalchemy.orm import Session

from taller_erp.core.errors import NoEncontrado, ErrorValidacion
from taller_erp.db import transaccion, asignar_campos
from taller_erp.models.pedidos import Producto, ProductoAjusteTalla
from taller_erp.utils.money import dec, redondear

logger = logging.getLogger(__name__)

CAMPOS_PRODUCTO = (
    "nombre", "consumo_base_metros", "incluye_mangas", "consumo_mangas_metros",
    "incluye_otro", "consumo_otro_metros", "descripcion_otro", "activo",
)


def calcular_consumo_para_talla(producto: Producto, talla: str) -> Decimal:
    """Metros de tela para una pieza de ``talla``.

    base + ajuste de la talla (sin distinguir mayúsculas; 0 si no hay)
    + mangas si ``incluye_mangas`` + otro si ``incluye_otro``.
    """
    consumo = dec(producto.consumo_base_metros)
    talla_norm = (talla or "").strip().upper()
    for ajuste in producto.ajustes_talla:
        if ajuste.talla.strip().upper() == talla_norm:
            consumo += dec(ajuste.ajuste_metros)
            break
    if producto.incluye_mangas:
        consumo += dec(producto.consumo_mangas_metros)
    if producto.incluye_otro:
        consumo += dec(producto.consumo_otro_metros)
    return consumo


def obtener(db: Session, producto_id: int) -> Producto:
    producto = db.get(Producto, producto_id)
    if producto is None:
        raise NoEncontrado("Producto", "id", producto_id)
    return producto


def listar(db: Session, solo_activos: bool = True) -> list[Producto]:
    stmt = select(Producto).order_by(Producto.nombre)
    if solo_activos:
        stmt = stmt.where(Producto.activo.is_(True))
    return list(db.execute(stmt).scalars())


def _validar(datos: Mapping[str, Any]):
    for campo in ("consumo_base_metros", "consumo_mangas_metros", "consumo_otro_metros"):
        if datos.get(campo) is not None and dec(datos[campo]) < 0:
            raise ErrorValidacion(f"{campo} no puede ser negativo", {"campo": campo})


def _reemplazar_ajustes(db: Session, producto: Producto, ajustes: Mapping[str, Any]):
    tallas = [t.strip().upper() for t in ajustes]
    if len(set(tallas)) != len(tallas):
        raise ErrorValidacion("Talla repetida en los ajustes")
    producto.ajustes_talla.clear()
    # los DELETE deben llegar antes que los INSERT (unique producto+talla)
    db.flush()
    for talla, metros in ajustes.items():
        producto.ajustes_talla.append(
            ProductoAjusteTalla(talla=talla.strip().upper(), ajuste_metros=redondear(metros))
        )


def crear(db: Session, datos: dict[str, Any], ajustes: Mapping[str, Any] | None = None) -> Producto:
    _validar(datos)
    with transaccion(db):
        producto = Producto(**{k: v for k, v in datos.items() if k in CAMPOS_PRODUCTO and v is not None})
        db.add(producto)
        if ajustes:
            _reemplazar_ajustes(db, producto, ajustes)
        db.flush()
    logger.info("Producto creado: %s", producto.nombre)
    return producto


def actualizar(
    db: Session, producto_id: int, datos: dict[str, Any], ajustes: Mapping[str, Any] | None = None
) -> Producto:
    """``ajustes`` distinto de None reemplaza por completo los ajustes por talla."""
    _validar(datos)
    with transaccion(db):
        producto = obtener(db, producto_id)
        asignar_campos(producto, datos, CAMPOS_PRODUCTO)
        if ajustes is not None:
            _reemplazar_ajustes(db, producto, ajustes)
    logger.info("Producto actualizado: %s", producto_id)
    return producto


def desactivar(db: Session, producto_id: int) -> Producto:
    with transaccion(db):
        producto = obtener(db, producto_id)
        producto.activo = False
    logger.info("Producto desactivado: %s", producto_id)
    return producto


def mapa_ajustes(db: Session, producto_id: int) -> dict[str, Decimal]:
    producto = obtener(db, producto_id)
    return {a.talla: dec(a.ajuste_metros) for a in producto.ajustes_talla}


def calcular_consumo_tela(db: Session, producto_id: int, cantidades: Mapping[str, int]) -> dict[str, Any]:
    """Consumo estimado para ``{talla: piezas}``, con desglose por talla."""
    producto = obtener(db, producto_id)
    detalle = {}
    total = Decimal("0")
    for talla, piezas in cantidades.items():
        if piezas < 0:
            raise ErrorValidacion("La cantidad de piezas no puede ser negativa", {"talla": talla})
        por_pieza = calcular_consumo_para_talla(producto, talla)
        subtotal = por_pieza * piezas
        detalle[talla] = {"por_pieza": por_pieza, "piezas": piezas, "subtotal": subtotal}
        total += subtotal
    return {
        "producto_id": producto.id,
        "total_piezas": sum(cantidades.values()),
        "total_metros": redondear(total),
        "detalle": detalle,
    }
