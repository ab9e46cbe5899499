# taller_erp/auth/__init__.py
import logging
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from taller_erp.core import config
from taller_erp.core.errors import CredencialesInvalidas
from taller_erp.db import get_db
from taller_erp.models import Usuario, Rol

logger = logging.getLogger(__name__)

pwd = CryptContext(schemes=["bcrypt"], deprecated="auto")
bearer = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    return pwd.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    return pwd.verify(password, hashed)


def crear_token(usuario: Usuario) -> str:
    ahora = datetime.now(timezone.utc)
    payload = {
        "sub": usuario.username,
        "userId": usuario.id,
        "rol": usuario.rol.value,
        "nombreCompleto": usuario.nombre_completo,
        "iat": ahora,
        "exp": ahora + timedelta(minutes=config.JWT_EXPIRATION_MINUTES),
    }
    return jwt.encode(payload, config.SECRET_KEY, algorithm=config.JWT_ALGORITHM)


def decodificar_token(token: str) -> dict[str, Any]:
    """Valida firma y expiración; cualquier problema es CredencialesInvalidas."""
    try:
        return jwt.decode(token, config.SECRET_KEY, algorithms=[config.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError as exc:
        raise CredencialesInvalidas("Token expirado") from exc
    except jwt.InvalidTokenError as exc:
        raise CredencialesInvalidas(f"Token inválido: {exc}") from exc


def get_current_user(
    credenciales: HTTPAuthorizationCredentials | None = Depends(bearer),
    db: Session = Depends(get_db),
) -> Usuario:
    if credenciales is None:
        raise CredencialesInvalidas("Falta el encabezado Authorization: Bearer <token>")
    claims = decodificar_token(credenciales.credentials)
    usuario = db.get(Usuario, claims.get("userId"))
    if usuario is None or not usuario.activo or usuario.username != claims.get("sub"):
        logger.warning("Token rechazado para %s", claims.get("sub"))
        raise CredencialesInvalidas("Usuario inexistente o inactivo")
    return usuario


def is_admin(usuario: Usuario | None) -> bool:
    return bool(usuario and usuario.rol == Rol.ADMIN)
