from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from taller_erp.auth import get_current_user
from taller_erp.db import get_db
from taller_erp.models import EstadoPedido, Usuario
from taller_erp.schemas.pedidos import (
    PedidoCreate, PedidoUpdate, PedidoOut, PedidoStatsOut, EstadoIn, CancelarIn, ImagenIn, ImagenOut,
)
from taller_erp.services import pedidos as svc

router = APIRouter(prefix="/api/pedidos", tags=["pedidos"], dependencies=[Depends(get_current_user)])


@router.get("", response_model=list[PedidoOut])
def pedidos_list(estado: Optional[EstadoPedido] = None, db: Session = Depends(get_db)):
    return svc.listar(db, estado)


@router.post("", response_model=PedidoOut, status_code=201)
def pedidos_create(datos: PedidoCreate, db: Session = Depends(get_db), usuario: Usuario = Depends(get_current_user)):
    items = [it.model_dump() for it in datos.items]
    return svc.crear_pedido(db, datos.model_dump(exclude={"items"}), items, usuario_id=usuario.id)


# ---------- vistas derivadas (antes de /{pedido_id}) ----------
@router.get("/activos", response_model=list[PedidoOut])
def pedidos_activos(db: Session = Depends(get_db)):
    return svc.activos(db)


@router.get("/retrasados", response_model=list[PedidoOut])
def pedidos_retrasados(db: Session = Depends(get_db)):
    return svc.retrasados(db)


@router.get("/hoy", response_model=list[PedidoOut])
def pedidos_hoy(db: Session = Depends(get_db)):
    return svc.para_entregar_hoy(db)


@router.get("/proximos", response_model=list[PedidoOut])
def pedidos_proximos(dias: int = Query(7, ge=0, le=365), db: Session = Depends(get_db)):
    return svc.proximos(db, dias)


@router.get("/preferenciales", response_model=list[PedidoOut])
def pedidos_preferenciales(db: Session = Depends(get_db)):
    return svc.preferenciales_pendientes(db)


@router.get("/stats", response_model=PedidoStatsOut)
def pedidos_stats(db: Session = Depends(get_db)):
    return svc.estadisticas(db)


@router.get("/folio/{folio}", response_model=PedidoOut)
def pedidos_por_folio(folio: str, db: Session = Depends(get_db)):
    return svc.obtener_por_folio(db, folio)


@router.delete("/imagenes/{imagen_id}", status_code=204)
def pedidos_imagen_eliminar(imagen_id: int, db: Session = Depends(get_db)):
    svc.eliminar_imagen(db, imagen_id)


# ---------- pedido puntual ----------
@router.get("/{pedido_id}", response_model=PedidoOut)
def pedidos_detalle(pedido_id: int, db: Session = Depends(get_db)):
    return svc.obtener(db, pedido_id)


@router.put("/{pedido_id}", response_model=PedidoOut)
def pedidos_update(pedido_id: int, datos: PedidoUpdate, db: Session = Depends(get_db)):
    return svc.actualizar_pedido(db, pedido_id, datos.model_dump(exclude_unset=True))


@router.patch("/{pedido_id}/estado", response_model=PedidoOut)
def pedidos_estado(pedido_id: int, datos: EstadoIn, db: Session = Depends(get_db)):
    return svc.actualizar_estado(db, pedido_id, datos.estado)


@router.patch("/{pedido_id}/entregar", response_model=PedidoOut)
def pedidos_entregar(pedido_id: int, db: Session = Depends(get_db)):
    return svc.marcar_entregado(db, pedido_id)


@router.patch("/{pedido_id}/cancelar", response_model=PedidoOut)
def pedidos_cancelar(pedido_id: int, datos: CancelarIn, db: Session = Depends(get_db)):
    return svc.cancelar(db, pedido_id, datos.motivo)


@router.get("/{pedido_id}/imagenes", response_model=list[ImagenOut])
def pedidos_imagenes(pedido_id: int, db: Session = Depends(get_db)):
    return svc.imagenes(db, pedido_id)


@router.post("/{pedido_id}/imagenes", response_model=ImagenOut, status_code=201)
def pedidos_imagen_agregar(pedido_id: int, datos: ImagenIn, db: Session = Depends(get_db)):
    return svc.agregar_imagen(db, pedido_id, datos.model_dump())
