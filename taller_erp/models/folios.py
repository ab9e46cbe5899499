from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from taller_erp.models.base import Base


class FolioSecuencia(Base):
    """Contador persistente por nombre de secuencia (p. ej. ``pedido-2026``, ``VTA-2026``)."""
    __tablename__ = "folio_secuencia"
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    nombre: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    valor_actual: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
