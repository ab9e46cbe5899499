from datetime import date, timedelta


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_login_y_validate(client, admin):
    r = client.post("/api/auth/login", json={"username": "admin", "password": "admin123"})
    assert r.status_code == 200
    body = r.json()
    assert body["rol"] == "ADMIN" and body["tipo"] == "Bearer"
    assert "costos" in body["permisos"] and "usuarios" in body["permisos"]

    r = client.get("/api/auth/validate", headers={"Authorization": f"Bearer {body['token']}"})
    assert r.status_code == 200
    assert r.json()["username"] == "admin"
    assert r.json()["ultimo_login"] is not None


def test_login_invalido(client, admin):
    r = client.post("/api/auth/login", json={"username": "admin", "password": "mala"})
    assert r.status_code == 401
    body = r.json()
    assert set(body) == {"status", "error", "mensaje", "detalles", "timestamp"}
    assert body["status"] == 401


def test_sin_token_o_token_roto(client):
    assert client.get("/api/inventario/materiales").status_code == 401
    r = client.get("/api/inventario/materiales", headers={"Authorization": "Bearer no-es-un-jwt"})
    assert r.status_code == 401


def test_costos_solo_admin(client, taller_headers):
    assert client.get("/api/costos", headers=taller_headers).status_code == 403
    assert client.get("/api/usuarios", headers=taller_headers).status_code == 403
    assert client.get("/api/pedidos", headers=taller_headers).status_code == 200


def test_flujo_inventario(client, auth_headers):
    r = client.post(
        "/api/inventario/materiales",
        json={"nombre": "Tela dry-fit", "tipo_material_id": 1, "stock_minimo": 20, "stock_critico": 5},
        headers=auth_headers,
    )
    assert r.status_code == 201
    material = r.json()
    assert material["stock_actual"] == 0
    assert material["nivel_alerta"] == "CRITICO"

    r = client.post(
        "/api/inventario/rollos",
        json={"material_id": material["id"], "codigo_rollo": "R-9", "metros_iniciales": 100, "destino": "mixto"},
        headers=auth_headers,
    )
    assert r.status_code == 201
    rollo = r.json()
    assert rollo["metros_actuales"] == 100.0 and rollo["destino"] == "MIXTO"

    r = client.post(
        "/api/inventario/salida-corte", json={"rollo_id": rollo["id"], "metros": 60}, headers=auth_headers
    )
    assert r.status_code == 201
    assert r.json()["cantidad"] == -60.0

    r = client.post(
        "/api/inventario/salida-corte", json={"rollo_id": rollo["id"], "metros": 60}, headers=auth_headers
    )
    assert r.status_code == 400
    assert r.json()["detalles"] == {"materialId": material["id"], "stockDisponible": 40.0, "cantidadRequerida": 60.0}

    r = client.get(f"/api/inventario/materiales/{material['id']}/movimientos", headers=auth_headers)
    assert [m["tipo_movimiento"] for m in r.json()] == ["SALIDA_CORTE", "ENTRADA"]

    r = client.post(
        "/api/inventario/rollos",
        json={"material_id": material["id"], "codigo_rollo": "R-9", "metros_iniciales": 10, "destino": "CORTE"},
        headers=auth_headers,
    )
    assert r.status_code == 409


def test_no_encontrado(client, auth_headers):
    r = client.get("/api/pedidos/999", headers=auth_headers)
    assert r.status_code == 404
    assert r.json()["mensaje"] == "Pedido no encontrado con id: 999"


def test_flujo_pedido_y_costos(client, auth_headers):
    entrega = (date.today() + timedelta(days=5)).isoformat()
    r = client.post(
        "/api/pedidos",
        json={
            "nombre_pedido": "Uniformes Tigres",
            "cliente_nombre": "Liga infantil",
            "fecha_entrega": entrega,
            "prioridad": "preferencial",
            "items": [{"talla": "XL"}, {"talla": "M", "nombre_jugador": "Leo", "numero_espalda": "10"}, {"talla": "6"}],
        },
        headers=auth_headers,
    )
    assert r.status_code == 201, r.text
    pedido = r.json()
    assert pedido["folio"] == "2026-0001"
    assert [i["talla"] for i in pedido["items"]] == ["6", "M", "XL"]

    assert client.get(f"/api/pedidos/folio/{pedido['folio']}", headers=auth_headers).json()["id"] == pedido["id"]
    assert [p["id"] for p in client.get("/api/pedidos/preferenciales", headers=auth_headers).json()] == [pedido["id"]]

    r = client.patch(f"/api/pedidos/{pedido['id']}/estado", json={"estado": "EN_CORTE"}, headers=auth_headers)
    assert r.json()["estado"] == "EN_CORTE"

    r = client.post(
        "/api/costos",
        json={"pedido_id": pedido["id"], "costo_tela": 100, "costo_vinil": 20, "costo_hilo": 5,
              "costo_maquila": 30, "costo_varios": 5, "precio_venta": 200},
        headers=auth_headers,
    )
    assert r.status_code == 200
    costo = r.json()
    assert costo["total_costo"] == 160.0
    assert costo["margen_porcentaje"] == 20.0
    assert costo["nivel_alerta"] == "NORMAL"

    r = client.post("/api/costos", json={"pedido_id": pedido["id"], "costo_tela": -1, "precio_venta": 200},
                    headers=auth_headers)
    assert r.status_code == 400

    r = client.patch(f"/api/pedidos/{pedido['id']}/cancelar", json={"motivo": "sin anticipo"}, headers=auth_headers)
    assert r.json()["estado"] == "CANCELADO"
    assert r.json()["observaciones"] == "CANCELADO: sin anticipo"


def test_pedido_sin_items(client, auth_headers):
    r = client.post(
        "/api/pedidos",
        json={"nombre_pedido": "X", "cliente_nombre": "Y", "fecha_entrega": date.today().isoformat(), "items": []},
        headers=auth_headers,
    )
    assert r.status_code == 400


def test_venta_de_tela_api(client, auth_headers):
    material = client.post(
        "/api/inventario/materiales", json={"nombre": "Tela lycra", "tipo_material_id": 1}, headers=auth_headers
    ).json()
    rollo = client.post(
        "/api/inventario/rollos",
        json={"material_id": material["id"], "codigo_rollo": "L-1", "metros_iniciales": 30, "destino": "CORTE"},
        headers=auth_headers,
    ).json()

    r = client.post(
        "/api/ventas/tela", json={"rollo_id": rollo["id"], "metros": 2, "precio_unitario": 90}, headers=auth_headers
    )
    assert r.status_code == 400
    assert r.json()["error"] == "Destino de rollo incorrecto"

    rollo = client.post(
        "/api/inventario/rollos",
        json={"material_id": material["id"], "codigo_rollo": "L-2", "metros_iniciales": 30, "destino": "VENTA"},
        headers=auth_headers,
    ).json()
    r = client.post(
        "/api/ventas/tela",
        json={"rollo_id": rollo["id"], "metros": 2, "precio_unitario": 90, "metodo_pago": "tarjeta"},
        headers=auth_headers,
    )
    assert r.status_code == 201
    venta = r.json()
    assert venta["folio_venta"] == f"VTA-{date.today().year}-0001"
    assert venta["total"] == 180.0
    assert venta["metodo_pago"] == "TARJETA"

    assert len(client.get("/api/ventas/hoy", headers=auth_headers).json()) == 1
    assert client.get("/api/reportes/dashboard", headers=auth_headers).json()["ventas_hoy_total"] == 180.0


def test_admin_gestiona_usuarios(client, auth_headers):
    r = client.post(
        "/api/usuarios",
        json={"username": "vendedor", "password": "secreta1", "nombre_completo": "Luis Local", "rol": "local"},
        headers=auth_headers,
    )
    assert r.status_code == 201
    uid = r.json()["id"]
    assert client.get("/api/usuarios/existe/vendedor", headers=auth_headers).json() == {"existe": True}

    r = client.post("/api/usuarios", json={"username": "vendedor", "password": "otra123"}, headers=auth_headers)
    assert r.status_code == 409

    assert client.patch(f"/api/usuarios/{uid}/toggle", headers=auth_headers).json()["activo"] is False
    r = client.post("/api/auth/login", json={"username": "vendedor", "password": "secreta1"})
    assert r.status_code == 401


def test_null_explicito_en_campo_obligatorio(client, auth_headers, crear_pedido, tela):
    pedido = crear_pedido(observaciones="urgente")

    r = client.put(f"/api/pedidos/{pedido.id}", json={"fecha_entrega": None}, headers=auth_headers)
    assert r.status_code == 400
    assert r.json()["detalles"] == {"campo": "fecha_entrega"}
    r = client.put(
        f"/api/pedidos/{pedido.id}", json={"cliente_nombre": "Otro", "prioridad": None}, headers=auth_headers
    )
    assert r.status_code == 400
    assert client.get(f"/api/pedidos/{pedido.id}", headers=auth_headers).json()["cliente_nombre"] == "Club Halcones"

    # las columnas opcionales sí se pueden limpiar
    r = client.put(f"/api/pedidos/{pedido.id}", json={"observaciones": None}, headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["observaciones"] is None

    r = client.put(f"/api/inventario/materiales/{tela.id}", json={"nombre": None}, headers=auth_headers)
    assert r.status_code == 400

    r = client.post(
        "/api/usuarios",
        json={"username": "vendedor", "password": "secreta1", "nombre_completo": "Luis Local", "rol": "local"},
        headers=auth_headers,
    )
    uid = r.json()["id"]
    for campo in ("rol", "activo"):
        r = client.put(f"/api/usuarios/{uid}", json={campo: None}, headers=auth_headers)
        assert r.status_code == 400


def test_permisos_del_rol_taller(client, taller_headers):
    r = client.post("/api/auth/login", json={"username": "costurera", "password": "secreta1"})
    permisos = r.json()["permisos"]
    assert "pedidos" in permisos and "inventario" in permisos
    assert "costos" not in permisos and "usuarios" not in permisos
