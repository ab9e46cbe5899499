import os
from datetime import date, timedelta
from decimal import Decimal

# -------- Entorno base de tests --------
# SQLite en memoria antes de importar el paquete (db.py crea el engine al importar)
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["FOLIO_PREFIX"] = "2026"
os.environ["ADMIN_USERNAME"] = "admin"
os.environ["ADMIN_PASSWORD"] = "admin123"
os.environ.setdefault("PEDIDOS_TRANSICIONES_ESTRICTAS", "0")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from taller_erp.db import engine, SessionLocal  # noqa: E402
from taller_erp.main import app  # noqa: E402
from taller_erp.models import Base, Destino, Rol, Rollo, TipoMaterial  # noqa: E402
from taller_erp.seed import seed_tipos_material  # noqa: E402
from taller_erp.services import inventario, pedidos, usuarios  # noqa: E402


@pytest.fixture(autouse=True)
def db():
    """Esquema limpio por test; retorna una sesión para preparar datos."""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    seed_tipos_material(session)
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


# -------- Fábricas de datos --------
@pytest.fixture
def crear_material(db):
    def _crear(nombre="Tela dry-fit azul", tipo="TELA", stock=Decimal("0"), **extra):
        tipo_id = db.query(TipoMaterial).filter(TipoMaterial.nombre == tipo).one().id
        datos = {"nombre": nombre, "tipo_material_id": tipo_id, "stock_inicial": stock, **extra}
        return inventario.crear_material(db, datos)
    return _crear


@pytest.fixture
def crear_rollo(db):
    def _crear(material, codigo="R-001", metros=Decimal("50"), destino=Destino.MIXTO):
        rollo = Rollo(material_id=material.id, codigo_rollo=codigo, metros_iniciales=metros, destino=destino)
        return inventario.registrar_rollo(db, rollo)
    return _crear


@pytest.fixture
def crear_pedido(db):
    def _crear(items=("M", "L"), entrega=None, **datos):
        base = {
            "nombre_pedido": "Uniformes Halcones",
            "cliente_nombre": "Club Halcones",
            "fecha_entrega": entrega or date.today() + timedelta(days=10),
        }
        base.update(datos)
        return pedidos.crear_pedido(db, base, [{"talla": t} for t in items])
    return _crear


@pytest.fixture
def tela(crear_material):
    return crear_material(stock=Decimal("0"), stock_minimo=Decimal("20"), stock_critico=Decimal("5"))


@pytest.fixture
def admin(db):
    return usuarios.seed_admin_user(db)


# -------- Cliente HTTP --------
@pytest.fixture
def client():
    return TestClient(app)


def _login(client, username, password):
    r = client.post("/api/auth/login", json={"username": username, "password": password})
    assert r.status_code == 200, r.text
    return {"Authorization": f"Bearer {r.json()['token']}"}


@pytest.fixture
def auth_headers(client, admin):
    return _login(client, "admin", "admin123")


@pytest.fixture
def taller_headers(client, db):
    usuarios.crear(db, "costurera", "secreta1", {"nombre_completo": "Ana Taller", "rol": Rol.TALLER})
    return _login(client, "costurera", "secreta1")
