import logging
from datetime import datetime
from typing import Any

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from taller_erp.auth import hash_password, verify_password
from taller_erp.core import config
from taller_erp.core.errors import NoEncontrado, CodigoDuplicado, CredencialesInvalidas, ErrorValidacion
from taller_erp.db import transaccion, asignar_campos
from taller_erp.models import Usuario, Rol

logger = logging.getLogger(__name__)

CAMPOS_USUARIO = ("nombre_completo", "email", "telefono", "rol", "activo")


def autenticar(db: Session, username: str, password: str) -> Usuario:
    usuario = db.execute(
        select(Usuario).where(Usuario.username == username.strip(), Usuario.activo.is_(True))
    ).scalar_one_or_none()
    if usuario is None or not verify_password(password, usuario.password_hash):
        logger.warning("Login fallido para %s", username)
        raise CredencialesInvalidas("Usuario o contraseña incorrectos")
    with transaccion(db):
        usuario.ultimo_login = datetime.utcnow()
    logger.info("Login exitoso: %s", usuario.username)
    return usuario


def existe_username(db: Session, username: str) -> bool:
    return bool(db.scalar(
        select(func.count()).select_from(Usuario).where(Usuario.username == username.strip())
    ))


def obtener(db: Session, usuario_id: int) -> Usuario:
    usuario = db.get(Usuario, usuario_id)
    if usuario is None:
        raise NoEncontrado("Usuario", "id", usuario_id)
    return usuario


def listar(db: Session) -> list[Usuario]:
    return list(db.execute(select(Usuario).order_by(Usuario.username)).scalars())


def crear(db: Session, username: str, password: str, datos: dict[str, Any]) -> Usuario:
    if not username.strip() or not password:
        raise ErrorValidacion("Usuario y contraseña son obligatorios")
    if existe_username(db, username):
        raise CodigoDuplicado(f"El usuario {username} ya existe")
    with transaccion(db):
        usuario = Usuario(
            username=username.strip(),
            password_hash=hash_password(password),
            **{k: v for k, v in datos.items() if k in CAMPOS_USUARIO and v is not None},
        )
        db.add(usuario)
        db.flush()
    logger.info("Usuario creado: %s (%s)", usuario.username, usuario.rol.value)
    return usuario


def actualizar(db: Session, usuario_id: int, datos: dict[str, Any]) -> Usuario:
    with transaccion(db):
        usuario = obtener(db, usuario_id)
        asignar_campos(usuario, datos, CAMPOS_USUARIO)
    logger.info("Usuario actualizado: %s", usuario.username)
    return usuario


def cambiar_rol(db: Session, usuario_id: int, rol: Rol) -> Usuario:
    return actualizar(db, usuario_id, {"rol": rol})


def alternar_activo(db: Session, usuario_id: int) -> Usuario:
    with transaccion(db):
        usuario = obtener(db, usuario_id)
        usuario.activo = not usuario.activo
    logger.info("Usuario %s activo=%s", usuario.username, usuario.activo)
    return usuario


def cambiar_password(db: Session, usuario_id: int, nueva: str, actual: str | None = None) -> Usuario:
    """Con ``actual`` se verifica la contraseña vigente (cambio por el propio usuario)."""
    if not nueva:
        raise ErrorValidacion("La nueva contraseña no puede estar vacía")
    with transaccion(db):
        usuario = obtener(db, usuario_id)
        if actual is not None and not verify_password(actual, usuario.password_hash):
            raise CredencialesInvalidas("Contraseña actual incorrecta")
        usuario.password_hash = hash_password(nueva)
    logger.info("Contraseña actualizada para %s", usuario.username)
    return usuario


def seed_admin_user(db: Session) -> Usuario | None:
    """Crea un admin por defecto si no hay ningún usuario."""
    if db.scalar(select(func.count()).select_from(Usuario)):
        return None
    admin = crear(
        db, config.ADMIN_USERNAME, config.ADMIN_PASSWORD,
        {"nombre_completo": "Administrador", "rol": Rol.ADMIN},
    )
    logger.info("Administrador inicial creado: %s", admin.username)
    return admin
