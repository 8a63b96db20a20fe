from .catalog_service import CatalogService
from .image_positions import ImagePositionManager
from .laptop_service import LaptopForm, LaptopService
from .order_service import OrderService
from .pricing import PriceCalculation, calculate_price_from_usd

__all__ = [
    "CatalogService",
    "ImagePositionManager",
    "LaptopForm",
    "LaptopService",
    "OrderService",
    "PriceCalculation",
    "calculate_price_from_usd",
]
