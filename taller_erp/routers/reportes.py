from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from taller_erp.auth import get_current_user
from taller_erp.db import get_db
from taller_erp.schemas.reportes import DashboardOut, ReporteInventarioOut, ReportePedidosOut, ReporteVentasOut
from taller_erp.services import reportes as svc

router = APIRouter(prefix="/api/reportes", tags=["reportes"], dependencies=[Depends(get_current_user)])


@router.get("/dashboard", response_model=DashboardOut)
def dashboard(db: Session = Depends(get_db)):
    return svc.dashboard(db)


@router.get("/inventario", response_model=ReporteInventarioOut)
def reporte_inventario(db: Session = Depends(get_db)):
    return svc.reporte_inventario(db)


@router.get("/pedidos", response_model=ReportePedidosOut)
def reporte_pedidos(inicio: date, fin: date, db: Session = Depends(get_db)):
    return svc.reporte_pedidos(db, inicio, fin)


@router.get("/ventas", response_model=ReporteVentasOut)
def reporte_ventas(inicio: date, fin: date, db: Session = Depends(get_db)):
    return svc.reporte_ventas(db, inicio, fin)
