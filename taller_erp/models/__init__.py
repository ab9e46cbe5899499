# taller_erp/models/__init__.py
from .base import Base

# Re-export para: from taller_erp.models import Material, Pedido, Usuario
from .usuarios import Usuario, Rol
from .inventario import (
    TipoMaterial, UnidadMedida, Material, PrioridadMaterial,
    Rollo, Destino, MovimientoInventario, TipoMovimiento,
)
from .pedidos import (
    Producto, ProductoAjusteTalla, Pedido, PedidoItem, PedidoImagen,
    Prioridad, TipoPedido, EstadoPedido, Ubicacion, TipoImagen, ESTADOS_CERRADOS,
)
from .costos import CostoPedido, NivelAlerta, clasificar_nivel_alerta
from .ventas import Venta, VentaItem, TipoVenta, MetodoPago
from .folios import FolioSecuencia
