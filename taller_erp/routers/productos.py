from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from taller_erp.auth import get_current_user
from taller_erp.db import get_db
from taller_erp.schemas.pedidos import ProductoIn, ProductoOut, ConsumoIn, ConsumoOut
from taller_erp.services import productos as svc

router = APIRouter(prefix="/api/productos", tags=["productos"], dependencies=[Depends(get_current_user)])


@router.get("", response_model=list[ProductoOut])
def productos_list(todos: bool = False, db: Session = Depends(get_db)):
    return svc.listar(db, solo_activos=not todos)


@router.post("", response_model=ProductoOut, status_code=201)
def productos_create(datos: ProductoIn, db: Session = Depends(get_db)):
    return svc.crear(db, datos.model_dump(exclude={"ajustes_talla"}), datos.ajustes_talla)


@router.get("/{producto_id}", response_model=ProductoOut)
def productos_detalle(producto_id: int, db: Session = Depends(get_db)):
    return svc.obtener(db, producto_id)


@router.put("/{producto_id}", response_model=ProductoOut)
def productos_update(producto_id: int, datos: ProductoIn, db: Session = Depends(get_db)):
    return svc.actualizar(db, producto_id, datos.model_dump(exclude={"ajustes_talla"}), datos.ajustes_talla)


@router.delete("/{producto_id}", response_model=ProductoOut)
def productos_desactivar(producto_id: int, db: Session = Depends(get_db)):
    return svc.desactivar(db, producto_id)


@router.get("/{producto_id}/ajustes-talla", response_model=dict[str, float])
def productos_ajustes(producto_id: int, db: Session = Depends(get_db)):
    return svc.mapa_ajustes(db, producto_id)


@router.post("/{producto_id}/calcular-consumo", response_model=ConsumoOut)
def productos_consumo(producto_id: int, datos: ConsumoIn, db: Session = Depends(get_db)):
    return svc.calcular_consumo_tela(db, producto_id, datos.cantidades)
