from sqlalchemy import select
from sqlalchemy.orm import Session

from taller_erp.models import TipoMaterial, UnidadMedida

TIPOS_MATERIAL = [
    ("TELA", "Tela en rollo para corte o venta por metro", UnidadMedida.METROS),
    ("VINIL", "Vinil textil para números y nombres", UnidadMedida.METROS),
    ("HILO", "Hilo de costura", UnidadMedida.CONOS),
    ("CLON", "Playeras clon terminadas", UnidadMedida.PIEZAS),
    ("ACCESORIO", "Etiquetas, elásticos y otros", UnidadMedida.PIEZAS),
]


def seed_tipos_material(db: Session):
    existentes = set(db.execute(select(TipoMaterial.nombre)).scalars())
    for nombre, descripcion, unidad in TIPOS_MATERIAL:
        if nombre not in existentes:
            db.add(TipoMaterial(nombre=nombre, descripcion=descripcion, unidad_medida=unidad))
    db.commit()
