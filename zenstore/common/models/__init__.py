from .base import Base
from .image import Image
from .laptop import Laptop
from .order import ORDER_STATUSES, Order

__all__ = ["Base", "Image", "Laptop", "Order", "ORDER_STATUSES"]
