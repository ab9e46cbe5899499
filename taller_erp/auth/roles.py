from fastapi import Depends

from taller_erp.auth import get_current_user, is_admin
from taller_erp.core.errors import NoAutorizado
from taller_erp.models import Usuario, Rol


def require_roles(*roles: Rol):
    """Dependencia que deja pasar solo a los roles indicados."""
    def dependencia(usuario: Usuario = Depends(get_current_user)) -> Usuario:
        if usuario.rol not in roles:
            raise NoAutorizado(f"Se requiere rol {' o '.join(r.value for r in roles)}")
        return usuario
    return dependencia


def require_admin(usuario: Usuario = Depends(get_current_user)) -> Usuario:
    if not is_admin(usuario):
        raise NoAutorizado("No autorizado")
    return usuario


# Módulos que el frontend muestra por rol; costos y usuarios exigen require_admin
MODULOS = ("inventario", "productos", "pedidos", "ventas", "reportes", "costos", "usuarios")
PERMISOS_POR_ROL = {
    Rol.ADMIN: MODULOS,
    Rol.TALLER: ("inventario", "productos", "pedidos", "ventas", "reportes"),
    Rol.LOCAL: ("inventario", "productos", "pedidos", "ventas", "reportes"),
}


def permisos_de(rol: Rol) -> list[str]:
    return list(PERMISOS_POR_ROL.get(rol, ()))
