from datetime import date, timedelta
from decimal import Decimal

import pytest

from taller_erp.core.errors import DestinoIncorrecto, StockInsuficiente, ErrorValidacion, NoEncontrado
from taller_erp.models import (
    Destino, MetodoPago, MovimientoInventario, TipoMovimiento, TipoVenta, Ubicacion, Venta
)
from taller_erp.services import ventas

HOY = date(2026, 5, 2)


@pytest.fixture
def rollo_venta(tela, crear_rollo):
    return crear_rollo(tela, codigo="RV-1", metros=Decimal("25"), destino=Destino.VENTA)


def _vender_tela(db, rollo, metros, precio=Decimal("85"), **kw):
    return ventas.vender_tela_por_metros(
        db, rollo.id, metros, precio, MetodoPago.EFECTIVO, Ubicacion.LOCAL, "Doña Rosa", hoy=HOY, **kw
    )


def test_venta_de_tela(db, tela, rollo_venta, admin):
    venta = _vender_tela(db, rollo_venta, Decimal("2.5"), vendedor_id=admin.id)

    assert venta.folio_venta == "VTA-2026-0001"
    assert venta.tipo_venta == TipoVenta.TELA_METROS
    assert venta.total == Decimal("212.50")
    assert len(venta.items) == 1
    assert venta.items[0].rollo_id == rollo_venta.id
    assert venta.items[0].subtotal == Decimal("212.50")

    db.refresh(rollo_venta)
    db.refresh(tela)
    assert rollo_venta.metros_actuales == Decimal("22.5")
    assert tela.stock_actual == Decimal("22.5")
    mov = db.query(MovimientoInventario).filter_by(tipo_movimiento=TipoMovimiento.SALIDA_VENTA).one()
    assert mov.motivo == "Venta - Folio: VTA-2026-0001"
    assert mov.usuario_id == admin.id


def test_folios_consecutivos_y_por_anio(db, rollo_venta):
    assert _vender_tela(db, rollo_venta, Decimal("1")).folio_venta == "VTA-2026-0001"
    assert _vender_tela(db, rollo_venta, Decimal("1")).folio_venta == "VTA-2026-0002"
    otra = ventas.vender_tela_por_metros(
        db, rollo_venta.id, Decimal("1"), Decimal("85"), MetodoPago.TARJETA, Ubicacion.TALLER, hoy=date(2027, 1, 3)
    )
    assert otra.folio_venta == "VTA-2027-0001"


def test_tela_de_rollo_para_corte(db, tela, crear_rollo):
    rollo = crear_rollo(tela, metros=Decimal("10"), destino=Destino.CORTE)
    with pytest.raises(DestinoIncorrecto):
        _vender_tela(db, rollo, Decimal("5"))

    db.refresh(rollo)
    assert rollo.metros_actuales == Decimal("10")
    assert db.query(Venta).count() == 0


def test_tela_sin_metros_suficientes(db, rollo_venta):
    with pytest.raises(StockInsuficiente):
        _vender_tela(db, rollo_venta, Decimal("30"))
    assert db.query(Venta).count() == 0


def test_tela_validaciones(db, rollo_venta):
    with pytest.raises(ErrorValidacion):
        _vender_tela(db, rollo_venta, Decimal("0"))
    with pytest.raises(ErrorValidacion):
        _vender_tela(db, rollo_venta, Decimal("1"), precio=Decimal("-1"))
    with pytest.raises(ErrorValidacion):
        _vender_tela(db, rollo_venta, Decimal("0.005"))
    assert db.query(Venta).count() == 0
    with pytest.raises(NoEncontrado):
        ventas.vender_tela_por_metros(db, 999, Decimal("1"), Decimal("1"), MetodoPago.EFECTIVO, Ubicacion.LOCAL)


def test_venta_de_clones(db, crear_material):
    clon = crear_material(nombre="Clon Real Madrid M", tipo="CLON", stock=Decimal("10"))

    venta = ventas.vender_unidades(
        db, clon.id, Decimal("3"), Decimal("250"), MetodoPago.TRANSFERENCIA, Ubicacion.LOCAL, hoy=HOY
    )

    assert venta.tipo_venta == TipoVenta.CLON
    assert venta.total == Decimal("750.00")
    db.refresh(clon)
    assert clon.stock_actual == Decimal("7")
    mov = db.query(MovimientoInventario).filter_by(tipo_movimiento=TipoMovimiento.SALIDA_VENTA).one()
    assert mov.motivo == f"Venta de clones - Folio: {venta.folio_venta}"
    assert mov.rollo_id is None


def test_venta_de_vinil(db, crear_material):
    vinil = crear_material(nombre="Vinil dorado", tipo="VINIL", stock=Decimal("5"))
    venta = ventas.vender_unidades(
        db, vinil.id, Decimal("1.5"), Decimal("40"), MetodoPago.EFECTIVO, Ubicacion.TALLER,
        tipo_venta=TipoVenta.VINIL, hoy=HOY,
    )
    mov = db.query(MovimientoInventario).filter_by(tipo_movimiento=TipoMovimiento.SALIDA_VENTA).one()
    assert mov.motivo == f"Venta - Folio: {venta.folio_venta}"


def test_clones_sin_stock(db, crear_material):
    clon = crear_material(nombre="Clon", tipo="CLON", stock=Decimal("2"))
    with pytest.raises(StockInsuficiente) as exc:
        ventas.vender_unidades(db, clon.id, Decimal("3"), Decimal("250"), MetodoPago.EFECTIVO, Ubicacion.LOCAL)
    assert exc.value.detalles["stockDisponible"] == 2.0
    assert db.query(Venta).count() == 0
    db.refresh(clon)
    assert clon.stock_actual == Decimal("2")


def test_consultas(db, rollo_venta):
    a = _vender_tela(db, rollo_venta, Decimal("1"), precio=Decimal("100"))
    b = ventas.vender_tela_por_metros(
        db, rollo_venta.id, Decimal("2"), Decimal("100"), MetodoPago.TARJETA, Ubicacion.TALLER, hoy=HOY
    )

    assert {v.id for v in ventas.del_dia(db)} == {a.id, b.id}
    assert [v.id for v in ventas.por_ubicacion(db, Ubicacion.TALLER)] == [b.id]
    assert len(ventas.listar(db)) == 2
    hoy = date.today()
    assert ventas.totales(db, hoy, hoy) == {"total": Decimal("300.00"), "cantidad": 2}
    assert ventas.por_rango(db, hoy + timedelta(days=1), hoy + timedelta(days=2)) == []
    with pytest.raises(ErrorValidacion):
        ventas.por_rango(db, hoy, hoy - timedelta(days=1))
    assert ventas.obtener(db, a.id).folio_venta == a.folio_venta
