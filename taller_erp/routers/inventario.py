from decimal import Decimal

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from taller_erp.auth import get_current_user
from taller_erp.db import get_db
from taller_erp.models import Rollo, Usuario
from taller_erp.schemas.inventario import (
    TipoMaterialOut, MaterialCreate, MaterialUpdate, MaterialOut, RolloCreate, RolloOut,
    MovimientoCreate, MovimientoOut, SalidaCorteIn, SalidaVentaIn,
)
from taller_erp.services import inventario as svc

router = APIRouter(prefix="/api/inventario", tags=["inventario"], dependencies=[Depends(get_current_user)])


# ---------- Materiales ----------
@router.get("/tipos-material", response_model=list[TipoMaterialOut])
def tipos_material(db: Session = Depends(get_db)):
    return svc.listar_tipos_material(db)


@router.get("/materiales", response_model=list[MaterialOut])
def materiales_list(db: Session = Depends(get_db)):
    return svc.listar_materiales(db)


@router.get("/materiales/alertas", response_model=list[MaterialOut])
def materiales_alertas(db: Session = Depends(get_db)):
    return svc.materiales_con_alerta(db)


@router.get("/materiales/criticos", response_model=list[MaterialOut])
def materiales_criticos(db: Session = Depends(get_db)):
    return svc.materiales_criticos(db)


@router.post("/materiales", response_model=MaterialOut, status_code=201)
def materiales_create(datos: MaterialCreate, db: Session = Depends(get_db), usuario: Usuario = Depends(get_current_user)):
    return svc.crear_material(db, datos.model_dump(), usuario_id=usuario.id)


@router.get("/materiales/{material_id}", response_model=MaterialOut)
def materiales_detalle(material_id: int, db: Session = Depends(get_db)):
    return svc.obtener_material(db, material_id)


@router.put("/materiales/{material_id}", response_model=MaterialOut)
def materiales_update(material_id: int, datos: MaterialUpdate, db: Session = Depends(get_db)):
    return svc.actualizar_material(db, material_id, datos.model_dump(exclude_unset=True))


@router.get("/materiales/{material_id}/stock-suficiente")
def materiales_stock_suficiente(material_id: int, cantidad: Decimal = Query(..., gt=0), db: Session = Depends(get_db)):
    return {"suficiente": svc.hay_stock_suficiente(db, material_id, cantidad)}


@router.get("/materiales/{material_id}/movimientos", response_model=list[MovimientoOut])
def materiales_movimientos(material_id: int, db: Session = Depends(get_db)):
    svc.obtener_material(db, material_id)
    return svc.movimientos_por_material(db, material_id)


# ---------- Rollos ----------
@router.get("/rollos", response_model=list[RolloOut])
def rollos_list(db: Session = Depends(get_db)):
    return svc.rollos_disponibles(db)


@router.get("/rollos/corte", response_model=list[RolloOut])
def rollos_corte(db: Session = Depends(get_db)):
    return svc.rollos_para_corte(db)


@router.get("/rollos/venta", response_model=list[RolloOut])
def rollos_venta(db: Session = Depends(get_db)):
    return svc.rollos_para_venta(db)


@router.post("/rollos", response_model=RolloOut, status_code=201)
def rollos_create(datos: RolloCreate, db: Session = Depends(get_db), usuario: Usuario = Depends(get_current_user)):
    rollo = Rollo(**datos.model_dump(exclude_none=True))
    return svc.registrar_rollo(db, rollo, usuario_id=usuario.id)


@router.get("/rollos/{rollo_id}", response_model=RolloOut)
def rollos_detalle(rollo_id: int, db: Session = Depends(get_db)):
    return svc.obtener_rollo(db, rollo_id)


# ---------- Movimientos ----------
@router.get("/movimientos", response_model=list[MovimientoOut])
def movimientos_recientes(limite: int = Query(20, ge=1, le=500), db: Session = Depends(get_db)):
    return svc.ultimos_movimientos(db, limite)


@router.get("/movimientos/hoy", response_model=list[MovimientoOut])
def movimientos_hoy(db: Session = Depends(get_db)):
    return svc.movimientos_del_dia(db)


@router.post("/movimientos", response_model=MovimientoOut, status_code=201)
def movimientos_create(datos: MovimientoCreate, db: Session = Depends(get_db), usuario: Usuario = Depends(get_current_user)):
    return svc.registrar_movimiento(
        db, datos.material_id, datos.rollo_id, datos.tipo_movimiento, datos.cantidad,
        datos.motivo, datos.pedido_id, usuario.id,
    )


@router.post("/salida-corte", response_model=MovimientoOut, status_code=201)
def salida_corte(datos: SalidaCorteIn, db: Session = Depends(get_db), usuario: Usuario = Depends(get_current_user)):
    return svc.registrar_salida_para_corte(db, datos.rollo_id, datos.metros, datos.pedido_id, usuario.id)


@router.post("/salida-venta", response_model=MovimientoOut, status_code=201)
def salida_venta(datos: SalidaVentaIn, db: Session = Depends(get_db), usuario: Usuario = Depends(get_current_user)):
    return svc.registrar_salida_para_venta(db, datos.rollo_id, datos.metros, datos.motivo, usuario.id)
