"""Excepciones de dominio del ERP.

Cada clase lleva el código HTTP con el que la expone el manejador global de
``main.py`` y un diccionario opcional de detalles para el cliente.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Any


class ErrorERP(Exception):
    """Error base de negocio."""

    status_code = 500
    titulo = "Error interno del servidor"

    def __init__(self, mensaje: str, detalles: dict[str, Any] | None = None):
        super().__init__(mensaje)
        self.mensaje = mensaje
        self.detalles = detalles or {}


class NoEncontrado(ErrorERP):
    status_code = 404
    titulo = "Recurso no encontrado"

    def __init__(self, recurso: str, campo: str = "id", valor: Any = None):
        super().__init__(f"{recurso} no encontrado con {campo}: {valor}")
        self.recurso = recurso


class StockInsuficiente(ErrorERP):
    status_code = 400
    titulo = "Stock insuficiente"

    def __init__(self, material_id: int, disponible: Decimal, requerido: Decimal):
        super().__init__(
            f"Stock insuficiente. Disponible: {disponible}, requerido: {requerido}",
            {
                "materialId": material_id,
                "stockDisponible": float(disponible),
                "cantidadRequerida": float(requerido),
            },
        )
        self.material_id = material_id
        self.disponible = disponible
        self.requerido = requerido


class DestinoIncorrecto(ErrorERP):
    status_code = 400
    titulo = "Destino de rollo incorrecto"


class CodigoDuplicado(ErrorERP):
    status_code = 409
    titulo = "Código duplicado"


class FolioDuplicado(ErrorERP):
    status_code = 409
    titulo = "Folio duplicado"


class ErrorValidacion(ErrorERP):
    status_code = 400
    titulo = "Error de validación"


class ConflictoConcurrencia(ErrorERP):
    status_code = 409
    titulo = "Conflicto de concurrencia"


class TransicionNoPermitida(ErrorERP):
    status_code = 409
    titulo = "Transición de estado no permitida"


class CredencialesInvalidas(ErrorERP):
    status_code = 401
    titulo = "Credenciales inválidas"


class NoAutorizado(ErrorERP):
    status_code = 403
    titulo = "No autorizado"
