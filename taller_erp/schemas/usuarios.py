# schemas/usuarios.py
from datetime import datetime
from typing import Annotated, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from taller_erp.models.usuarios import Rol
from taller_erp.schemas.comun import Mayus


class LoginIn(BaseModel):
    username: str
    password: str


class TokenOut(BaseModel):
    token: str
    tipo: str = "Bearer"
    user_id: int
    username: str
    nombre_completo: str
    rol: Rol
    permisos: List[str] = []


class UsuarioCreate(BaseModel):
    username: str = Field(min_length=3, max_length=50)
    password: str = Field(min_length=6)
    nombre_completo: str = ""
    email: Optional[str] = None
    telefono: Optional[str] = None
    rol: Annotated[Rol, Mayus] = Rol.TALLER
    activo: bool = True


class UsuarioUpdate(BaseModel):
    nombre_completo: Optional[str] = None
    email: Optional[str] = None
    telefono: Optional[str] = None
    rol: Optional[Annotated[Rol, Mayus]] = None
    activo: Optional[bool] = None


class RolIn(BaseModel):
    rol: Annotated[Rol, Mayus]


class PasswordIn(BaseModel):
    nueva: str = Field(min_length=6)
    actual: Optional[str] = None


class UsuarioOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    username: str
    nombre_completo: str
    email: Optional[str]
    telefono: Optional[str]
    rol: Rol
    activo: bool
    ultimo_login: Optional[datetime]
