# taller_erp/routers/usuarios.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from taller_erp.auth.roles import require_admin
from taller_erp.db import get_db
from taller_erp.schemas.usuarios import UsuarioCreate, UsuarioUpdate, UsuarioOut, RolIn, PasswordIn
from taller_erp.services import usuarios as svc

# ---------- RUTAS SOLO ADMIN ----------
router = APIRouter(
    prefix="/api/usuarios",
    tags=["usuarios"],
    dependencies=[Depends(require_admin)],  # <- bloquea todo este grupo
)


@router.get("", response_model=list[UsuarioOut])
def usuarios_index(db: Session = Depends(get_db)):
    return svc.listar(db)


@router.get("/existe/{username}")
def usuarios_existe(username: str, db: Session = Depends(get_db)):
    return {"existe": svc.existe_username(db, username)}


@router.post("", response_model=UsuarioOut, status_code=201)
def usuarios_crear(datos: UsuarioCreate, db: Session = Depends(get_db)):
    return svc.crear(db, datos.username, datos.password, datos.model_dump(exclude={"username", "password"}))


@router.get("/{uid}", response_model=UsuarioOut)
def usuarios_detalle(uid: int, db: Session = Depends(get_db)):
    return svc.obtener(db, uid)


@router.put("/{uid}", response_model=UsuarioOut)
def usuarios_actualizar(uid: int, datos: UsuarioUpdate, db: Session = Depends(get_db)):
    return svc.actualizar(db, uid, datos.model_dump(exclude_unset=True))


@router.patch("/{uid}/toggle", response_model=UsuarioOut)
def usuarios_toggle(uid: int, db: Session = Depends(get_db)):
    return svc.alternar_activo(db, uid)


@router.patch("/{uid}/rol", response_model=UsuarioOut)
def usuarios_rol(uid: int, datos: RolIn, db: Session = Depends(get_db)):
    return svc.cambiar_rol(db, uid, datos.rol)


@router.post("/{uid}/password", response_model=UsuarioOut)
def usuarios_password(uid: int, datos: PasswordIn, db: Session = Depends(get_db)):
    # el admin puede resetear sin conocer la actual
    return svc.cambiar_password(db, uid, datos.nueva)
