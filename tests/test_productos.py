from decimal import Decimal

import pytest

from taller_erp.core.errors import ErrorValidacion, NoEncontrado
from taller_erp.services import productos


@pytest.fixture
def playera(db):
    return productos.crear(
        db,
        {
            "nombre": "Playera fútbol",
            "consumo_base_metros": Decimal("1.20"),
            "incluye_mangas": True,
            "consumo_mangas_metros": Decimal("0.30"),
            "incluye_otro": False,
            "consumo_otro_metros": Decimal("0.10"),
        },
        {"XL": Decimal("0.15"), "6": Decimal("-0.40")},
    )


def test_consumo_por_talla(playera):
    assert productos.calcular_consumo_para_talla(playera, "XL") == Decimal("1.65")
    assert productos.calcular_consumo_para_talla(playera, "xl") == Decimal("1.65")
    assert productos.calcular_consumo_para_talla(playera, "6") == Decimal("1.10")
    # talla sin ajuste: base + mangas
    assert productos.calcular_consumo_para_talla(playera, "5XL") == Decimal("1.50")


def test_consumo_es_puro(playera):
    antes = (playera.consumo_base_metros, len(playera.ajustes_talla))
    resultados = {productos.calcular_consumo_para_talla(playera, "XL") for _ in range(3)}
    assert resultados == {Decimal("1.65")}
    assert (playera.consumo_base_metros, len(playera.ajustes_talla)) == antes


def test_consumo_con_otro(db, playera):
    productos.actualizar(db, playera.id, {"incluye_otro": True})
    assert productos.calcular_consumo_para_talla(playera, "M") == Decimal("1.60")


def test_calcular_consumo_tela(db, playera):
    r = productos.calcular_consumo_tela(db, playera.id, {"XL": 2, "M": 10})
    assert r["total_piezas"] == 12
    assert r["total_metros"] == Decimal("18.30")
    assert r["detalle"]["XL"]["subtotal"] == Decimal("3.30")
    with pytest.raises(ErrorValidacion):
        productos.calcular_consumo_tela(db, playera.id, {"M": -1})


def test_reemplazar_ajustes(db, playera):
    productos.actualizar(db, playera.id, {}, {"xl": Decimal("0.25"), "L": Decimal("0.05")})
    assert productos.mapa_ajustes(db, playera.id) == {"XL": Decimal("0.25"), "L": Decimal("0.05")}

    productos.actualizar(db, playera.id, {"nombre": "Playera básquet"})
    assert len(productos.mapa_ajustes(db, playera.id)) == 2


def test_ajuste_repetido(db):
    with pytest.raises(ErrorValidacion):
        productos.crear(db, {"nombre": "Short", "consumo_base_metros": Decimal("0.8")}, {"M": 1, "m": 2})


def test_consumo_negativo(db):
    with pytest.raises(ErrorValidacion):
        productos.crear(db, {"nombre": "Short", "consumo_base_metros": Decimal("-0.8")})


def test_desactivar(db, playera):
    productos.desactivar(db, playera.id)
    assert productos.listar(db) == []
    assert [p.id for p in productos.listar(db, solo_activos=False)] == [playera.id]
    with pytest.raises(NoEncontrado):
        productos.obtener(db, 999)
