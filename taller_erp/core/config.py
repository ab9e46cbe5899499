import os
from datetime import date

from dotenv import load_dotenv

load_dotenv()

DB_HOST = os.getenv("DB_HOST", "localhost")
DB_PORT = os.getenv("DB_PORT", "3306")
DB_NAME = os.getenv("DB_NAME", "herrera_erp")
DB_USER = os.getenv("DB_USER", "root")
DB_PASS = os.getenv("DB_PASS", "")

# DATABASE_URL completa tiene prioridad (los tests la apuntan a SQLite en memoria)
DATABASE_URL = os.getenv("DATABASE_URL") or (
    f"mysql+pymysql://{DB_USER}:{DB_PASS}@{DB_HOST}:{DB_PORT}/{DB_NAME}?charset=utf8mb4"
)
DEBUG_SQL = os.getenv("DEBUG_SQL", "0") == "1"

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-change-me")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRATION_MINUTES = int(os.getenv("JWT_EXPIRATION_MINUTES", "1440"))

FOLIO_PREFIX = os.getenv("FOLIO_PREFIX", str(date.today().year))
FOLIO_MAX_INTENTOS = int(os.getenv("FOLIO_MAX_INTENTOS", "10"))

PEDIDOS_TRANSICIONES_ESTRICTAS = os.getenv("PEDIDOS_TRANSICIONES_ESTRICTAS", "0") == "1"

ADMIN_USERNAME = os.getenv("ADMIN_USERNAME", "admin")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "admin123")

LOG_LEVEL = os.getenv("LOG_LEVEL", "info").upper()

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
