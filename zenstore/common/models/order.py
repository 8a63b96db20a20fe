from sqlalchemy import Column, DateTime, Integer, String, Text, func
from .base import Base


ORDER_STATUSES = ("pending", "contacted", "completed", "cancelled")


class Order(Base):
    """Interest request submitted from a product page."""

    __tablename__ = "order"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(255), nullable=False)
    laptop_choice = Column(String(255), nullable=False)
    phone_number = Column(String(64), nullable=False)
    email = Column(String(255), nullable=False)
    product_link = Column(String(1024), nullable=True)
    status = Column(String(32), nullable=False, default="pending")
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now())
