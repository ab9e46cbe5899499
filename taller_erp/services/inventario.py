"""Libro de inventario: materiales, rollos y movimientos.

Todo cambio de ``Material.stock_actual`` o ``Rollo.metros_actuales`` pasa por
``aplicar_movimiento``, que en la misma transacción actualiza el material,
el rollo (si hay) e inserta exactamente un ``MovimientoInventario``. Las
filas se leen con ``FOR UPDATE`` + ``populate_existing`` y además llevan
columna de versión, así dos retiros concurrentes no pisan el mismo stock.
"""
import logging
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from taller_erp.core.errors import (
    NoEncontrado, StockInsuficiente, DestinoIncorrecto, CodigoDuplicado, ErrorValidacion
)
from taller_erp.db import transaccion, asignar_campos
from taller_erp.models.inventario import (
    Material, Rollo, Destino, MovimientoInventario, TipoMovimiento, TipoMaterial
)
from taller_erp.models.pedidos import Pedido
from taller_erp.utils.money import dec, redondear

logger = logging.getLogger(__name__)

TIPOS_SALIDA = (TipoMovimiento.SALIDA_CORTE, TipoMovimiento.SALIDA_VENTA, TipoMovimiento.MERMA)

CAMPOS_MATERIAL = (
    "tipo_material_id", "nombre", "color", "talla", "stock_minimo",
    "stock_critico", "prioridad", "precio_unitario", "activo",
)


# ---------- utilidades ----------
def cantidad_con_signo(tipo: TipoMovimiento, cantidad: Decimal) -> Decimal:
    """ENTRADA suma, salidas y merma restan; AJUSTE respeta el signo recibido.

    Cantidades y saldos se guardan en centavos (DECIMAL 12,2).
    """
    cantidad = dec(cantidad)
    if cantidad != redondear(cantidad):
        raise ErrorValidacion(
            "La cantidad admite como máximo 2 decimales", {"cantidad": str(cantidad)}
        )
    cantidad = redondear(cantidad)
    if tipo == TipoMovimiento.AJUSTE:
        if cantidad == 0:
            raise ErrorValidacion("La cantidad de un ajuste no puede ser cero")
        return cantidad
    if cantidad <= 0:
        raise ErrorValidacion("La cantidad debe ser mayor a cero")
    return -cantidad if tipo in TIPOS_SALIDA else cantidad


def _bloquear(db: Session, modelo, obj_id: int):
    return db.execute(
        select(modelo)
        .where(modelo.id == obj_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    ).scalar_one_or_none()


def _obtener_material(db: Session, material_id: int, bloquear: bool = False) -> Material:
    material = _bloquear(db, Material, material_id) if bloquear else db.get(Material, material_id)
    if material is None:
        raise NoEncontrado("Material", "id", material_id)
    return material


def _obtener_rollo(db: Session, rollo_id: int, bloquear: bool = False) -> Rollo:
    rollo = _bloquear(db, Rollo, rollo_id) if bloquear else db.get(Rollo, rollo_id)
    if rollo is None:
        raise NoEncontrado("Rollo", "id", rollo_id)
    return rollo


def aplicar_movimiento(
    db: Session,
    material_id: int,
    rollo_id: int | None,
    tipo: TipoMovimiento,
    cantidad: Decimal,
    motivo: str | None,
    pedido_id: int | None = None,
    usuario_id: int | None = None,
) -> MovimientoInventario:
    """Valida todo antes de escribir; no confirma la transacción."""
    cantidad_final = cantidad_con_signo(tipo, cantidad)

    material = _obtener_material(db, material_id, bloquear=True)
    rollo = None
    if rollo_id is not None:
        rollo = _obtener_rollo(db, rollo_id, bloquear=True)
        if rollo.material_id != material.id:
            raise ErrorValidacion(
                f"El rollo {rollo.codigo_rollo} no pertenece al material {material.id}"
            )
    if pedido_id is not None and db.get(Pedido, pedido_id) is None:
        raise NoEncontrado("Pedido", "id", pedido_id)

    stock_anterior = dec(material.stock_actual)
    nuevo_stock = stock_anterior + cantidad_final
    if nuevo_stock < 0:
        raise StockInsuficiente(material.id, stock_anterior, abs(cantidad_final))

    if rollo is not None:
        nuevos_metros = dec(rollo.metros_actuales) + cantidad_final
        if nuevos_metros < 0:
            raise StockInsuficiente(material.id, dec(rollo.metros_actuales), abs(cantidad_final))
        rollo.metros_actuales = nuevos_metros

    material.stock_actual = nuevo_stock

    movimiento = MovimientoInventario(
        material_id=material.id,
        rollo_id=rollo.id if rollo is not None else None,
        tipo_movimiento=tipo,
        cantidad=cantidad_final,
        stock_anterior=stock_anterior,
        stock_nuevo=nuevo_stock,
        motivo=motivo,
        pedido_id=pedido_id,
        usuario_id=usuario_id,
        fecha=datetime.now(),
    )
    db.add(movimiento)
    db.flush()

    logger.info(
        "Movimiento registrado: %s - Material: %s - Cantidad: %s",
        tipo.value, material.nombre, cantidad_final,
    )
    return movimiento


# ========== MOVIMIENTOS ==========
def registrar_movimiento(
    db: Session,
    material_id: int,
    rollo_id: int | None,
    tipo: TipoMovimiento,
    cantidad: Decimal,
    motivo: str | None,
    pedido_id: int | None = None,
    usuario_id: int | None = None,
) -> MovimientoInventario:
    with transaccion(db):
        movimiento = aplicar_movimiento(
            db, material_id, rollo_id, tipo, cantidad, motivo, pedido_id, usuario_id
        )
    return movimiento


def retirar_de_rollo(
    db: Session,
    rollo_id: int,
    metros: Decimal,
    tipo: TipoMovimiento,
    motivo: str,
    pedido_id: int | None,
    usuario_id: int | None,
) -> MovimientoInventario:
    """Valida el destino del rollo y aplica la salida; no confirma la transacción."""
    rollo = _obtener_rollo(db, rollo_id)
    if tipo == TipoMovimiento.SALIDA_CORTE and not rollo.puede_usarse_para_corte:
        raise DestinoIncorrecto(f"El rollo {rollo.codigo_rollo} no está destinado para corte")
    if tipo == TipoMovimiento.SALIDA_VENTA and not rollo.puede_usarse_para_venta:
        raise DestinoIncorrecto(f"El rollo {rollo.codigo_rollo} no está destinado para venta")
    return aplicar_movimiento(db, rollo.material_id, rollo.id, tipo, metros, motivo, pedido_id, usuario_id)


def registrar_salida_para_corte(
    db: Session, rollo_id: int, metros: Decimal, pedido_id: int | None, usuario_id: int | None = None
) -> MovimientoInventario:
    with transaccion(db):
        movimiento = retirar_de_rollo(
            db, rollo_id, metros, TipoMovimiento.SALIDA_CORTE,
            f"Salida para corte - Pedido #{pedido_id}", pedido_id, usuario_id,
        )
    return movimiento


def registrar_salida_para_venta(
    db: Session, rollo_id: int, metros: Decimal, motivo: str, usuario_id: int | None = None
) -> MovimientoInventario:
    with transaccion(db):
        movimiento = retirar_de_rollo(
            db, rollo_id, metros, TipoMovimiento.SALIDA_VENTA, motivo, None, usuario_id
        )
    return movimiento


# ========== MATERIALES ==========
def crear_material(db: Session, datos: dict[str, Any], usuario_id: int | None = None) -> Material:
    """Alta de material; el stock inicial entra como movimiento ENTRADA."""
    stock_inicial = dec(datos.get("stock_inicial"))
    if stock_inicial < 0:
        raise ErrorValidacion("El stock inicial no puede ser negativo")
    tipo_id = datos.get("tipo_material_id")
    if tipo_id is not None and db.get(TipoMaterial, tipo_id) is None:
        raise NoEncontrado("TipoMaterial", "id", tipo_id)

    with transaccion(db):
        material = Material(
            **{k: v for k, v in datos.items() if k in CAMPOS_MATERIAL and v is not None},
            stock_actual=Decimal("0"),
        )
        db.add(material)
        db.flush()
        if stock_inicial > 0:
            aplicar_movimiento(
                db, material.id, None, TipoMovimiento.ENTRADA, stock_inicial,
                "Stock inicial", usuario_id=usuario_id,
            )
    logger.info("Material creado: %s", material.nombre)
    return material


def actualizar_material(db: Session, material_id: int, datos: dict[str, Any]) -> Material:
    """Edita datos descriptivos y umbrales; el stock solo cambia con movimientos."""
    with transaccion(db):
        material = _obtener_material(db, material_id)
        asignar_campos(material, datos, CAMPOS_MATERIAL)
    logger.info("Material actualizado: %s", material_id)
    return material


def obtener_material(db: Session, material_id: int) -> Material:
    return _obtener_material(db, material_id)


def listar_materiales(db: Session) -> list[Material]:
    stmt = select(Material).where(Material.activo.is_(True)).order_by(Material.nombre)
    return list(db.execute(stmt).scalars())


def materiales_con_alerta(db: Session) -> list[Material]:
    stmt = (
        select(Material)
        .where(Material.activo.is_(True), Material.stock_actual <= Material.stock_minimo)
        .order_by(Material.stock_actual)
    )
    return list(db.execute(stmt).scalars())


def materiales_criticos(db: Session) -> list[Material]:
    stmt = (
        select(Material)
        .where(Material.activo.is_(True), Material.stock_actual <= Material.stock_critico)
        .order_by(Material.stock_actual)
    )
    return list(db.execute(stmt).scalars())


def hay_stock_suficiente(db: Session, material_id: int, cantidad: Decimal) -> bool:
    return dec(_obtener_material(db, material_id).stock_actual) >= dec(cantidad)


def listar_tipos_material(db: Session) -> list[TipoMaterial]:
    return list(db.execute(select(TipoMaterial).order_by(TipoMaterial.nombre)).scalars())


# ========== ROLLOS ==========
def registrar_rollo(db: Session, rollo: Rollo, usuario_id: int | None = None) -> Rollo:
    """Alta de rollo y su ENTRADA de metros iniciales, todo o nada."""
    logger.info(
        "Registrando rollo: %s - %s metros - Destino: %s",
        rollo.codigo_rollo, rollo.metros_iniciales, rollo.destino,
    )
    if dec(rollo.metros_iniciales) <= 0:
        raise ErrorValidacion("Los metros iniciales deben ser mayores a cero")
    mensaje_duplicado = f"Ya existe un rollo con el código {rollo.codigo_rollo}"

    with transaccion(db):
        _obtener_material(db, rollo.material_id)
        existe = db.scalar(
            select(func.count()).select_from(Rollo).where(Rollo.codigo_rollo == rollo.codigo_rollo)
        )
        if existe:
            raise CodigoDuplicado(mensaje_duplicado)
        # arranca vacío: la ENTRADA lo deja en metros_iniciales
        rollo.metros_actuales = Decimal("0")
        db.add(rollo)
        try:
            db.flush()
        except IntegrityError as exc:
            # alta concurrente del mismo código
            raise CodigoDuplicado(mensaje_duplicado) from exc
        aplicar_movimiento(
            db, rollo.material_id, rollo.id, TipoMovimiento.ENTRADA, rollo.metros_iniciales,
            f"Entrada de rollo nuevo: {rollo.codigo_rollo}", usuario_id=usuario_id,
        )
    logger.info("Rollo registrado exitosamente: %s", rollo.codigo_rollo)
    return rollo


def obtener_rollo(db: Session, rollo_id: int) -> Rollo:
    return _obtener_rollo(db, rollo_id)


def _rollos_disponibles_stmt():
    return (
        select(Rollo)
        .where(Rollo.activo.is_(True), Rollo.metros_actuales > 0)
        .order_by(Rollo.fecha_entrada, Rollo.id)
    )


def rollos_disponibles(db: Session) -> list[Rollo]:
    return list(db.execute(_rollos_disponibles_stmt()).scalars())


def rollos_para_corte(db: Session) -> list[Rollo]:
    stmt = _rollos_disponibles_stmt().where(Rollo.destino.in_([Destino.CORTE, Destino.MIXTO]))
    return list(db.execute(stmt).scalars())


def rollos_para_venta(db: Session) -> list[Rollo]:
    stmt = _rollos_disponibles_stmt().where(Rollo.destino.in_([Destino.VENTA, Destino.MIXTO]))
    return list(db.execute(stmt).scalars())


def rollo_con_mas_metros(db: Session, material_id: int, destino: Destino) -> Rollo | None:
    """Rollo activo con más metros utilizable para ``destino`` (CORTE o VENTA)."""
    candidatos = [
        r for r in db.execute(select(Rollo).where(Rollo.material_id == material_id)).scalars()
        if r.activo and r.metros_actuales > 0
        and (r.puede_usarse_para_corte if destino == Destino.CORTE else r.puede_usarse_para_venta)
    ]
    return max(candidatos, key=lambda r: r.metros_actuales, default=None)


# ========== CONSULTAS DE MOVIMIENTOS ==========
def ultimos_movimientos(db: Session, limite: int = 20) -> list[MovimientoInventario]:
    stmt = (
        select(MovimientoInventario)
        .order_by(MovimientoInventario.fecha.desc(), MovimientoInventario.id.desc())
        .limit(limite)
    )
    return list(db.execute(stmt).scalars())


def movimientos_por_material(db: Session, material_id: int) -> list[MovimientoInventario]:
    stmt = (
        select(MovimientoInventario)
        .where(MovimientoInventario.material_id == material_id)
        .order_by(MovimientoInventario.fecha.desc(), MovimientoInventario.id.desc())
    )
    return list(db.execute(stmt).scalars())


def movimientos_del_dia(db: Session, hoy: date | None = None) -> list[MovimientoInventario]:
    hoy = hoy or date.today()
    inicio = datetime.combine(hoy, time.min)
    stmt = (
        select(MovimientoInventario)
        .where(MovimientoInventario.fecha >= inicio, MovimientoInventario.fecha < inicio + timedelta(days=1))
        .order_by(MovimientoInventario.fecha.desc(), MovimientoInventario.id.desc())
    )
    return list(db.execute(stmt).scalars())
