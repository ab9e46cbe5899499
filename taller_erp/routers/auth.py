from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from taller_erp.auth import crear_token, get_current_user
from taller_erp.auth.roles import permisos_de
from taller_erp.db import get_db
from taller_erp.models import Usuario
from taller_erp.schemas.usuarios import LoginIn, TokenOut, UsuarioOut, PasswordIn
from taller_erp.services import usuarios as svc

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _token_out(usuario: Usuario) -> TokenOut:
    return TokenOut(
        token=crear_token(usuario),
        user_id=usuario.id,
        username=usuario.username,
        nombre_completo=usuario.nombre_completo,
        rol=usuario.rol,
        permisos=permisos_de(usuario.rol),
    )


@router.post("/login", response_model=TokenOut)
def login(datos: LoginIn, db: Session = Depends(get_db)):
    return _token_out(svc.autenticar(db, datos.username, datos.password))


@router.get("/validate", response_model=UsuarioOut)
def validate(usuario: Usuario = Depends(get_current_user)):
    return usuario


@router.get("/me", response_model=UsuarioOut)
def me(usuario: Usuario = Depends(get_current_user)):
    return usuario


@router.post("/mi-password", response_model=UsuarioOut)
def mi_password(datos: PasswordIn, usuario: Usuario = Depends(get_current_user), db: Session = Depends(get_db)):
    # el propio usuario siempre debe confirmar la contraseña vigente
    return svc.cambiar_password(db, usuario.id, datos.nueva, datos.actual or "")
