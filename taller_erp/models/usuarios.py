from __future__ import annotations
import enum
from datetime import datetime
from typing import Optional

from sqlalchemy import String, Integer, DateTime, Boolean, Enum
from sqlalchemy.orm import Mapped, mapped_column

from taller_erp.models.base import Base


class Rol(str, enum.Enum):
    ADMIN = "ADMIN"
    TALLER = "TALLER"
    LOCAL = "LOCAL"


class Usuario(Base):
    __tablename__ = "usuarios"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    username: Mapped[str] = mapped_column(String(50), unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255))
    nombre_completo: Mapped[str] = mapped_column(String(100), default="")
    email: Mapped[Optional[str]] = mapped_column(String(100))
    telefono: Mapped[Optional[str]] = mapped_column(String(20))
    rol: Mapped[Rol] = mapped_column(Enum(Rol), default=Rol.TALLER)
    activo: Mapped[bool] = mapped_column(Boolean, default=True)
    ultimo_login: Mapped[Optional[datetime]] = mapped_column(DateTime)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
