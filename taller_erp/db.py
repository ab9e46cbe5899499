import logging
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.orm.exc import StaleDataError
from sqlalchemy.pool import StaticPool

from taller_erp.core import config
from taller_erp.core.errors import ConflictoConcurrencia, ErrorValidacion

logger = logging.getLogger(__name__)

kwargs: dict = {"echo": config.DEBUG_SQL}
if config.DATABASE_URL.startswith("sqlite"):
    # SQLite en memoria (tests): una sola conexión compartida entre hilos
    kwargs["connect_args"] = {"check_same_thread": False}
    if config.DATABASE_URL in ("sqlite://", "sqlite:///:memory:"):
        kwargs["poolclass"] = StaticPool
else:
    kwargs.update({"pool_pre_ping": True, "pool_recycle": 280})

engine = create_engine(config.DATABASE_URL, **kwargs)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaccion(db: Session):
    """Unidad de trabajo: confirma todo al salir o revierte todo ante cualquier error."""
    try:
        yield db
        db.commit()
    except StaleDataError as exc:
        db.rollback()
        logger.warning("Conflicto de versión detectado: %s", exc)
        raise ConflictoConcurrencia(
            "El registro fue modificado por otra operación, intente nuevamente"
        ) from exc
    except Exception:
        db.rollback()
        raise


def asignar_campos(obj, datos: dict, campos) -> None:
    """Copia a ``obj`` las claves de ``datos`` listadas en ``campos``.

    Un ``None`` explícito sobre una columna NOT NULL se rechaza antes de
    tocar el objeto.
    """
    columnas = obj.__table__.c
    cambios = {k: v for k, v in datos.items() if k in campos}
    for k, v in cambios.items():
        if v is None and not columnas[k].nullable:
            raise ErrorValidacion(f"{k} no puede quedar vacío", {"campo": k})
    for k, v in cambios.items():
        setattr(obj, k, v)
