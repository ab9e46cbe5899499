from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from taller_erp.auth.roles import require_admin
from taller_erp.db import get_db
from taller_erp.schemas.costos import CostoIn, CostoOut, ReporteCostosOut
from taller_erp.services import costos as svc

# utilidades y márgenes solo los ve el admin
router = APIRouter(prefix="/api/costos", tags=["costos"], dependencies=[Depends(require_admin)])


@router.get("", response_model=list[CostoOut])
def costos_list(
    limite: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    return svc.listar(db, limite, offset)


@router.post("", response_model=CostoOut)
def costos_guardar(datos: CostoIn, db: Session = Depends(get_db)):
    componentes = datos.model_dump(include=set(svc.COMPONENTES))
    return svc.registrar_costos(db, datos.pedido_id, componentes, datos.precio_venta, datos.notas)


@router.get("/reporte", response_model=ReporteCostosOut)
def costos_reporte(inicio: date, fin: date, db: Session = Depends(get_db)):
    return svc.reporte_periodo(db, inicio, fin)


@router.get("/top-rentables", response_model=list[CostoOut])
def costos_top(limite: int = Query(10, ge=1, le=100), db: Session = Depends(get_db)):
    return svc.pedidos_mas_rentables(db, limite)


@router.get("/con-perdida", response_model=list[CostoOut])
def costos_con_perdida(db: Session = Depends(get_db)):
    return svc.pedidos_con_perdida(db)


@router.get("/existe/pedido/{pedido_id}")
def costos_existe(pedido_id: int, db: Session = Depends(get_db)):
    return {"existe": svc.tiene_costos(db, pedido_id)}


@router.get("/pedido/{pedido_id}", response_model=CostoOut)
def costos_por_pedido(pedido_id: int, db: Session = Depends(get_db)):
    return svc.obtener_por_pedido(db, pedido_id)


@router.delete("/{costo_id}", status_code=204)
def costos_eliminar(costo_id: int, db: Session = Depends(get_db)):
    svc.eliminar(db, costo_id)
