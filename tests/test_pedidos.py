from datetime import date, timedelta
from decimal import Decimal

import pytest

from taller_erp.core import config
from taller_erp.core.errors import ErrorValidacion, NoEncontrado, FolioDuplicado, TransicionNoPermitida
from taller_erp.models import EstadoPedido, Pedido, Prioridad, TipoImagen
from taller_erp.services import pedidos, productos

HOY = date(2026, 6, 15)


def test_orden_de_tallas():
    items = [{"talla": "XL", "n": 1}, {"talla": "M", "n": 2}, {"talla": "6", "n": 3}]
    assert [it["talla"] for it in pedidos.ordenar_items(items)] == ["6", "M", "XL"]


def test_orden_estable_con_tallas_desconocidas():
    items = [{"talla": t} for t in ("5XL", "xl", "Unitalla", "3", "ch", "5XL")]
    ordenados = pedidos.ordenar_items(items)
    assert [it["talla"] for it in ordenados] == ["3", "ch", "xl", "5XL", "Unitalla", "5XL"]
    assert ordenados[3] is items[0] and ordenados[5] is items[5]


def test_crear_pedido_folio_y_items(db, crear_pedido):
    pedido = crear_pedido(items=("XL", "M", "6", "L"))

    assert pedido.folio == "2026-0001"
    assert pedido.estado == EstadoPedido.PENDIENTE
    assert pedido.total_piezas == 4
    assert pedido.total_tela_estimada is None
    assert [(i.talla, i.orden_talla) for i in pedido.items] == [("6", 1), ("M", 2), ("L", 3), ("XL", 4)]
    assert crear_pedido().folio == "2026-0002"


def test_crear_pedido_calcula_tela_con_producto(db, crear_pedido):
    playera = productos.crear(
        db,
        {"nombre": "Playera", "consumo_base_metros": Decimal("1.2"), "incluye_mangas": True,
         "consumo_mangas_metros": Decimal("0.3")},
        {"XL": Decimal("0.2")},
    )
    pedido = crear_pedido(items=("M", "XL", "XL"), producto_id=playera.id)
    # 1.5 + 1.7 + 1.7
    assert pedido.total_tela_estimada == Decimal("4.90")
    assert pedido.producto_id == playera.id


def test_crear_pedido_con_usuario(db, admin):
    pedido = pedidos.crear_pedido(
        db, {"nombre_pedido": "X", "cliente_nombre": "Y", "fecha_entrega": HOY}, [{"talla": "M"}], usuario_id=admin.id
    )
    assert pedido.usuario_creador_id == admin.id


def test_crear_pedido_validaciones(db, crear_pedido):
    with pytest.raises(ErrorValidacion):
        crear_pedido(items=())
    with pytest.raises(NoEncontrado):
        crear_pedido(producto_id=77)
    with pytest.raises(NoEncontrado):
        pedidos.crear_pedido(
            db, {"nombre_pedido": "X", "cliente_nombre": "Y", "fecha_entrega": HOY}, [{"talla": "M"}], usuario_id=77
        )
    assert db.query(Pedido).count() == 0


def test_folio_ocupado_se_salta(db, crear_pedido):
    db.add(Pedido(folio="2026-0001", nombre_pedido="Viejo", cliente_nombre="C", fecha_entrega=HOY))
    db.commit()
    assert crear_pedido().folio == "2026-0002"


def test_folio_agota_reintentos(db, crear_pedido, monkeypatch):
    monkeypatch.setattr(config, "FOLIO_MAX_INTENTOS", 2)
    for n in (1, 2):
        db.add(Pedido(folio=f"2026-000{n}", nombre_pedido="Viejo", cliente_nombre="C", fecha_entrega=HOY))
    db.commit()
    with pytest.raises(FolioDuplicado):
        crear_pedido()
    assert db.query(Pedido).count() == 2


def test_cambio_de_estado_libre_por_defecto(db, crear_pedido):
    pedido = crear_pedido()
    pedidos.actualizar_estado(db, pedido.id, EstadoPedido.LISTO)
    pedidos.actualizar_estado(db, pedido.id, EstadoPedido.EN_CORTE)
    assert pedidos.marcar_entregado(db, pedido.id).estado == EstadoPedido.ENTREGADO


def test_transiciones_estrictas(db, crear_pedido, monkeypatch):
    monkeypatch.setattr(config, "PEDIDOS_TRANSICIONES_ESTRICTAS", True)
    pedido = crear_pedido()
    with pytest.raises(TransicionNoPermitida):
        pedidos.actualizar_estado(db, pedido.id, EstadoPedido.LISTO)
    assert pedidos.obtener(db, pedido.id).estado == EstadoPedido.PENDIENTE

    pedidos.actualizar_estado(db, pedido.id, EstadoPedido.EN_CORTE)
    pedidos.cancelar(db, pedido.id, "cliente desistió")
    with pytest.raises(TransicionNoPermitida):
        pedidos.marcar_entregado(db, pedido.id)


def test_cancelar_agrega_motivo(db, crear_pedido):
    sin_obs = crear_pedido()
    con_obs = crear_pedido(observaciones="Números dorados")

    assert pedidos.cancelar(db, sin_obs.id, "sin anticipo").observaciones == "CANCELADO: sin anticipo"
    cancelado = pedidos.cancelar(db, con_obs.id, "cambio de diseño")
    assert cancelado.observaciones == "Números dorados\nCANCELADO: cambio de diseño"
    assert cancelado.estado == EstadoPedido.CANCELADO


def test_consultas_por_fecha(db, crear_pedido):
    atrasado = crear_pedido(entrega=HOY - timedelta(days=2))
    hoy = crear_pedido(entrega=HOY)
    en_tres = crear_pedido(entrega=HOY + timedelta(days=3), prioridad=Prioridad.PREFERENCIAL)
    lejano = crear_pedido(entrega=HOY + timedelta(days=30))
    entregado = crear_pedido(entrega=HOY - timedelta(days=5), prioridad=Prioridad.PREFERENCIAL)
    pedidos.marcar_entregado(db, entregado.id)

    assert [p.id for p in pedidos.retrasados(db, HOY)] == [atrasado.id]
    assert [p.id for p in pedidos.para_entregar_hoy(db, HOY)] == [hoy.id]
    assert [p.id for p in pedidos.proximos(db, 7, HOY)] == [hoy.id, en_tres.id]
    assert [p.id for p in pedidos.preferenciales_pendientes(db)] == [en_tres.id]
    assert {p.id for p in pedidos.activos(db)} == {atrasado.id, hoy.id, en_tres.id, lejano.id}
    assert atrasado.esta_retrasado(HOY) and not entregado.esta_retrasado(HOY)


def test_estadisticas(db, crear_pedido):
    a = crear_pedido(entrega=HOY)
    b = crear_pedido(entrega=HOY - timedelta(days=1))
    pedidos.cancelar(db, b.id, "duplicado")
    pedidos.actualizar_estado(db, a.id, EstadoPedido.EN_COSTURA)

    stats = pedidos.estadisticas(db, HOY)
    assert stats["total"] == 2
    assert stats["por_estado"]["EN_COSTURA"] == 1
    assert stats["por_estado"]["CANCELADO"] == 1
    assert stats["por_estado"]["PENDIENTE"] == 0
    assert stats["activos"] == 1
    assert stats["para_hoy"] == 1
    assert stats["retrasados"] == 0


def test_buscar_por_folio(db, crear_pedido):
    pedido = crear_pedido()
    assert pedidos.obtener_por_folio(db, pedido.folio).id == pedido.id
    with pytest.raises(NoEncontrado):
        pedidos.obtener_por_folio(db, "1999-9999")


def test_actualizar_pedido_no_toca_folio(db, crear_pedido):
    pedido = crear_pedido()
    actualizado = pedidos.actualizar_pedido(db, pedido.id, {"cliente_telefono": "555-1234", "folio": "HACK"})
    assert actualizado.cliente_telefono == "555-1234"
    assert actualizado.folio == "2026-0001"


def test_imagenes(db, crear_pedido):
    pedido = crear_pedido()
    logo = pedidos.agregar_imagen(
        db, pedido.id, {"url": "https://cdn.example.com/p/logo.png", "tipo": TipoImagen.LOGO, "es_principal": True}
    )
    diseno = pedidos.agregar_imagen(db, pedido.id, {"url": "https://cdn.example.com/p/diseno.jpg", "es_principal": True})

    assert logo.nombre_archivo == "logo.png"
    lista = pedidos.imagenes(db, pedido.id)
    assert [i.id for i in lista] == [diseno.id, logo.id]
    assert [i.es_principal for i in lista] == [True, False]

    pedidos.eliminar_imagen(db, logo.id)
    assert [i.id for i in pedidos.imagenes(db, pedido.id)] == [diseno.id]
    with pytest.raises(ErrorValidacion):
        pedidos.agregar_imagen(db, pedido.id, {"url": ""})
    with pytest.raises(NoEncontrado):
        pedidos.imagenes(db, 999)
