"""Ciclo de vida de pedidos: alta con folio, tallas ordenadas, estados e imágenes."""
import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Iterable

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from taller_erp.core import config
from taller_erp.core.errors import NoEncontrado, ErrorValidacion, TransicionNoPermitida
from taller_erp.db import transaccion, asignar_campos
from taller_erp.models.pedidos import (
    Pedido, PedidoItem, PedidoImagen, Producto, EstadoPedido, Prioridad, ESTADOS_CERRADOS
)
from taller_erp.models.usuarios import Usuario
from taller_erp.services.folios import siguiente_folio_pedido, generar_folio_unico
from taller_erp.services.productos import calcular_consumo_para_talla
from taller_erp.utils.money import redondear

logger = logging.getLogger(__name__)

ORDEN_TALLAS = ("3", "4", "6", "8", "10", "12", "14", "16", "CH", "M", "L", "XL", "XXL", "3XL", "4XL")
_POSICION_TALLA = {t: i for i, t in enumerate(ORDEN_TALLAS)}

# Solo se consulta con PEDIDOS_TRANSICIONES_ESTRICTAS=1
TRANSICIONES = {
    EstadoPedido.PENDIENTE: {EstadoPedido.EN_CORTE, EstadoPedido.CANCELADO},
    EstadoPedido.EN_CORTE: {EstadoPedido.EN_COSTURA, EstadoPedido.CANCELADO},
    EstadoPedido.EN_COSTURA: {EstadoPedido.EN_ACABADOS, EstadoPedido.CANCELADO},
    EstadoPedido.EN_ACABADOS: {EstadoPedido.LISTO, EstadoPedido.CANCELADO},
    EstadoPedido.LISTO: {EstadoPedido.ENTREGADO, EstadoPedido.CANCELADO},
    EstadoPedido.ENTREGADO: set(),
    EstadoPedido.CANCELADO: set(),
}

CAMPOS_PEDIDO = (
    "nombre_pedido", "cliente_nombre", "cliente_telefono", "cliente_email", "fecha_pedido",
    "fecha_entrega", "prioridad", "tipo", "color_principal", "color_hex_principal",
    "observaciones", "ubicacion_origen",
)
CAMPOS_ITEM = (
    "talla", "nombre_jugador", "numero_espalda", "color_especial",
    "color_hex_especial", "tiene_color_especial",
)


def posicion_talla(talla: str) -> int:
    """Índice en ORDEN_TALLAS; las tallas desconocidas van al final."""
    return _POSICION_TALLA.get((talla or "").strip().upper(), len(ORDEN_TALLAS))


def ordenar_items(items: Iterable[dict[str, Any]]) -> list[dict[str, Any]]:
    # sorted es estable: las tallas desconocidas conservan el orden de entrada
    return sorted(items, key=lambda it: posicion_talla(it.get("talla")))


# ========== ALTA ==========
def crear_pedido(
    db: Session,
    datos: dict[str, Any],
    items: list[dict[str, Any]],
    usuario_id: int | None = None,
) -> Pedido:
    if not items:
        raise ErrorValidacion("El pedido debe tener al menos un item")
    if any(not (it.get("talla") or "").strip() for it in items):
        raise ErrorValidacion("Todos los items deben indicar talla")
    for campo in ("nombre_pedido", "cliente_nombre", "fecha_entrega"):
        if not datos.get(campo):
            raise ErrorValidacion(f"{campo} es obligatorio", {"campo": campo})

    with transaccion(db):
        pedido = Pedido(**{k: v for k, v in datos.items() if k in CAMPOS_PEDIDO and v is not None})

        if usuario_id is not None:
            if db.get(Usuario, usuario_id) is None:
                raise NoEncontrado("Usuario", "id", usuario_id)
            pedido.usuario_creador_id = usuario_id

        producto = None
        producto_id = datos.get("producto_id")
        if producto_id is not None:
            producto = db.get(Producto, producto_id)
            if producto is None:
                raise NoEncontrado("Producto", "id", producto_id)
            pedido.producto_id = producto.id

        pedido.folio = generar_folio_unico(
            lambda: siguiente_folio_pedido(db),
            lambda folio: existe_folio(db, folio),
        )
        pedido.estado = EstadoPedido.PENDIENTE

        ordenados = ordenar_items(items)
        pedido.total_piezas = len(ordenados)
        if producto is not None:
            total = sum(
                (calcular_consumo_para_talla(producto, it["talla"]) for it in ordenados), Decimal("0")
            )
            pedido.total_tela_estimada = redondear(total)

        db.add(pedido)
        db.flush()

        for posicion, item in enumerate(ordenados, start=1):
            pedido.items.append(PedidoItem(
                **{k: v for k, v in item.items() if k in CAMPOS_ITEM and v is not None},
                orden_talla=posicion,
            ))
        db.flush()

    logger.info("Pedido creado: %s con %d piezas", pedido.folio, pedido.total_piezas)
    return pedido


def existe_folio(db: Session, folio: str) -> bool:
    return bool(db.scalar(select(func.count()).select_from(Pedido).where(Pedido.folio == folio)))


def actualizar_pedido(db: Session, pedido_id: int, datos: dict[str, Any]) -> Pedido:
    """Edita datos generales; folio, items y estado no se tocan aquí."""
    with transaccion(db):
        pedido = obtener(db, pedido_id)
        asignar_campos(pedido, datos, CAMPOS_PEDIDO)
    logger.info("Pedido actualizado: %s", pedido.folio)
    return pedido


# ========== ESTADOS ==========
def _validar_transicion(actual: EstadoPedido, nuevo: EstadoPedido):
    if not config.PEDIDOS_TRANSICIONES_ESTRICTAS or actual == nuevo:
        return
    if nuevo not in TRANSICIONES[actual]:
        raise TransicionNoPermitida(
            f"No se puede pasar de {actual.value} a {nuevo.value}",
            {"estadoActual": actual.value, "estadoSolicitado": nuevo.value},
        )


def actualizar_estado(db: Session, pedido_id: int, nuevo_estado: EstadoPedido) -> Pedido:
    with transaccion(db):
        pedido = obtener(db, pedido_id)
        anterior = pedido.estado
        _validar_transicion(anterior, nuevo_estado)
        pedido.estado = nuevo_estado
    logger.info("Estado de pedido %s: %s -> %s", pedido.folio, anterior.value, nuevo_estado.value)
    return pedido


def marcar_entregado(db: Session, pedido_id: int) -> Pedido:
    return actualizar_estado(db, pedido_id, EstadoPedido.ENTREGADO)


def cancelar(db: Session, pedido_id: int, motivo: str) -> Pedido:
    with transaccion(db):
        pedido = obtener(db, pedido_id)
        _validar_transicion(pedido.estado, EstadoPedido.CANCELADO)
        pedido.estado = EstadoPedido.CANCELADO
        nota = f"CANCELADO: {motivo}"
        pedido.observaciones = f"{pedido.observaciones}\n{nota}" if pedido.observaciones else nota
    logger.info("Pedido cancelado: %s - Motivo: %s", pedido.folio, motivo)
    return pedido


# ========== CONSULTAS ==========
def obtener(db: Session, pedido_id: int) -> Pedido:
    pedido = db.get(Pedido, pedido_id)
    if pedido is None:
        raise NoEncontrado("Pedido", "id", pedido_id)
    return pedido


def obtener_por_folio(db: Session, folio: str) -> Pedido:
    pedido = db.execute(select(Pedido).where(Pedido.folio == folio)).scalar_one_or_none()
    if pedido is None:
        raise NoEncontrado("Pedido", "folio", folio)
    return pedido


def listar(db: Session, estado: EstadoPedido | None = None) -> list[Pedido]:
    stmt = select(Pedido).order_by(Pedido.fecha_pedido.desc(), Pedido.id.desc())
    if estado is not None:
        stmt = stmt.where(Pedido.estado == estado)
    return list(db.execute(stmt).scalars())


def _activos():
    return select(Pedido).where(Pedido.estado.not_in(ESTADOS_CERRADOS))


def activos(db: Session) -> list[Pedido]:
    return list(db.execute(_activos().order_by(Pedido.fecha_entrega, Pedido.id)).scalars())


def retrasados(db: Session, hoy: date | None = None) -> list[Pedido]:
    hoy = hoy or date.today()
    stmt = _activos().where(Pedido.fecha_entrega < hoy).order_by(Pedido.fecha_entrega, Pedido.id)
    return list(db.execute(stmt).scalars())


def para_entregar_hoy(db: Session, hoy: date | None = None) -> list[Pedido]:
    hoy = hoy or date.today()
    stmt = _activos().where(Pedido.fecha_entrega == hoy).order_by(Pedido.prioridad.desc(), Pedido.id)
    return list(db.execute(stmt).scalars())


def proximos(db: Session, dias: int = 7, hoy: date | None = None) -> list[Pedido]:
    hoy = hoy or date.today()
    stmt = (
        _activos()
        .where(Pedido.fecha_entrega >= hoy, Pedido.fecha_entrega <= hoy + timedelta(days=dias))
        .order_by(Pedido.fecha_entrega, Pedido.id)
    )
    return list(db.execute(stmt).scalars())


def preferenciales_pendientes(db: Session) -> list[Pedido]:
    stmt = (
        _activos()
        .where(Pedido.prioridad == Prioridad.PREFERENCIAL)
        .order_by(Pedido.fecha_entrega, Pedido.id)
    )
    return list(db.execute(stmt).scalars())


def contar_por_estado(db: Session) -> dict[str, int]:
    filas = db.execute(select(Pedido.estado, func.count()).group_by(Pedido.estado)).all()
    conteo = {e.value: 0 for e in EstadoPedido}
    for estado, total in filas:
        conteo[estado.value] = total
    return conteo


def estadisticas(db: Session, hoy: date | None = None) -> dict[str, Any]:
    hoy = hoy or date.today()
    por_estado = contar_por_estado(db)
    return {
        "total": sum(por_estado.values()),
        "por_estado": por_estado,
        "activos": len(activos(db)),
        "retrasados": len(retrasados(db, hoy)),
        "para_hoy": len(para_entregar_hoy(db, hoy)),
        "preferenciales": len(preferenciales_pendientes(db)),
    }


# ========== IMÁGENES ==========
def agregar_imagen(db: Session, pedido_id: int, datos: dict[str, Any]) -> PedidoImagen:
    """Registra una imagen ya alojada (URL + metadatos)."""
    if not datos.get("url"):
        raise ErrorValidacion("La URL de la imagen es obligatoria", {"campo": "url"})
    with transaccion(db):
        pedido = obtener(db, pedido_id)
        imagen = PedidoImagen(
            nombre_archivo=datos.get("nombre_archivo") or datos["url"].rsplit("/", 1)[-1],
            **{k: datos[k] for k in ("url", "public_id", "tipo", "descripcion", "es_principal")
               if datos.get(k) is not None},
        )
        if imagen.es_principal:
            # una sola principal por pedido
            for otra in pedido.imagenes:
                otra.es_principal = False
        pedido.imagenes.append(imagen)
        db.flush()
    logger.info("Imagen agregada al pedido %s: %s", pedido.folio, imagen.nombre_archivo)
    return imagen


def imagenes(db: Session, pedido_id: int) -> list[PedidoImagen]:
    obtener(db, pedido_id)
    stmt = (
        select(PedidoImagen)
        .where(PedidoImagen.pedido_id == pedido_id)
        .order_by(PedidoImagen.es_principal.desc(), PedidoImagen.uploaded_at, PedidoImagen.id)
    )
    return list(db.execute(stmt).scalars())


def eliminar_imagen(db: Session, imagen_id: int) -> None:
    with transaccion(db):
        imagen = db.get(PedidoImagen, imagen_id)
        if imagen is None:
            raise NoEncontrado("PedidoImagen", "id", imagen_id)
        db.delete(imagen)
    logger.info("Imagen %s eliminada", imagen_id)
