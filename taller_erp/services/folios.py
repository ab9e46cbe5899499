"""Folios de pedidos y ventas a partir de contadores persistentes.

Cada secuencia es una fila de ``folio_secuencia`` que se bloquea con
``SELECT ... FOR UPDATE`` durante la transacción de quien la pide; el valor
solo queda consumido si esa transacción confirma. Las columnas de folio son
UNIQUE y quien genera el folio reintenta un número acotado de veces.
"""
import logging
from datetime import date
from typing import Callable

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from taller_erp.core import config
from taller_erp.core.errors import FolioDuplicado
from taller_erp.models.folios import FolioSecuencia

logger = logging.getLogger(__name__)


def siguiente_valor(db: Session, nombre: str) -> int:
    fila = db.execute(
        select(FolioSecuencia)
        .where(FolioSecuencia.nombre == nombre)
        .with_for_update()
        .execution_options(populate_existing=True)
    ).scalar_one_or_none()

    if fila is None:
        # primera vez: otra transacción podría crearla al mismo tiempo
        savepoint = db.begin_nested()
        try:
            fila = FolioSecuencia(nombre=nombre, valor_actual=1)
            db.add(fila)
            db.flush()
            savepoint.commit()
            logger.debug("Secuencia %s iniciada en 1", nombre)
            return 1
        except IntegrityError:
            savepoint.rollback()
            fila = db.execute(
                select(FolioSecuencia)
                .where(FolioSecuencia.nombre == nombre)
                .with_for_update()
                .execution_options(populate_existing=True)
            ).scalar_one()

    fila.valor_actual += 1
    db.flush()
    logger.debug("Secuencia %s -> %s", nombre, fila.valor_actual)
    return fila.valor_actual


def siguiente_folio_pedido(db: Session) -> str:
    """Formato ``<prefijo>-0001`` (prefijo por defecto: año en curso)."""
    prefijo = config.FOLIO_PREFIX
    numero = siguiente_valor(db, f"pedido-{prefijo}")
    return f"{prefijo}-{numero:04d}"


def siguiente_folio_venta(db: Session, hoy: date | None = None) -> str:
    """Formato ``VTA-<año>-0001``; la numeración reinicia cada año."""
    anio = (hoy or date.today()).year
    numero = siguiente_valor(db, f"VTA-{anio}")
    return f"VTA-{anio}-{numero:04d}"


def generar_folio_unico(
    generar: Callable[[], str],
    existe: Callable[[str], bool],
    max_intentos: int | None = None,
) -> str:
    """Pide folios a ``generar`` hasta encontrar uno libre o agotar los intentos."""
    max_intentos = max_intentos or config.FOLIO_MAX_INTENTOS
    for intento in range(1, max_intentos + 1):
        folio = generar()
        if not existe(folio):
            return folio
        logger.warning("Folio %s ya existe (intento %d/%d)", folio, intento, max_intentos)
    raise FolioDuplicado(f"No se pudo generar un folio libre tras {max_intentos} intentos")
