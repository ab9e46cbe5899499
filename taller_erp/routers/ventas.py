from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from taller_erp.auth import get_current_user
from taller_erp.db import get_db
from taller_erp.models import Ubicacion, Usuario
from taller_erp.schemas.ventas import VentaTelaIn, VentaUnidadesIn, VentaOut, TotalesVentasOut
from taller_erp.services import ventas as svc

router = APIRouter(prefix="/api/ventas", tags=["ventas"], dependencies=[Depends(get_current_user)])


@router.get("", response_model=list[VentaOut])
def ventas_list(
    ubicacion: Optional[Ubicacion] = None,
    limite: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    if ubicacion is not None:
        return svc.por_ubicacion(db, ubicacion)
    return svc.listar(db, limite, offset)


@router.get("/hoy", response_model=list[VentaOut])
def ventas_hoy(db: Session = Depends(get_db)):
    return svc.del_dia(db)


@router.get("/rango", response_model=list[VentaOut])
def ventas_rango(inicio: date, fin: date, db: Session = Depends(get_db)):
    return svc.por_rango(db, inicio, fin)


@router.get("/totales", response_model=TotalesVentasOut)
def ventas_totales(inicio: date, fin: date, db: Session = Depends(get_db)):
    return svc.totales(db, inicio, fin)


@router.post("/tela", response_model=VentaOut, status_code=201)
def ventas_tela(datos: VentaTelaIn, db: Session = Depends(get_db), usuario: Usuario = Depends(get_current_user)):
    return svc.vender_tela_por_metros(
        db, datos.rollo_id, datos.metros, datos.precio_unitario, datos.metodo_pago, datos.ubicacion,
        datos.cliente_nombre, datos.cliente_telefono, vendedor_id=usuario.id,
    )


@router.post("/clone", response_model=VentaOut, status_code=201)
def ventas_unidades(datos: VentaUnidadesIn, db: Session = Depends(get_db), usuario: Usuario = Depends(get_current_user)):
    return svc.vender_unidades(
        db, datos.material_id, datos.cantidad, datos.precio_unitario, datos.metodo_pago, datos.ubicacion,
        datos.cliente_nombre, datos.cliente_telefono, vendedor_id=usuario.id, tipo_venta=datos.tipo_venta,
    )


@router.get("/{venta_id}", response_model=VentaOut)
def ventas_detalle(venta_id: int, db: Session = Depends(get_db)):
    return svc.obtener(db, venta_id)
