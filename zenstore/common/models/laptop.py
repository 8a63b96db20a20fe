from sqlalchemy import Boolean, Column, DateTime, Integer, JSON, Numeric, String, Text, func
from sqlalchemy.orm import relationship
from .base import Base


class Laptop(Base):
    __tablename__ = "laptop"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    specs = Column(JSON, nullable=False, default=list)
    price = Column(Numeric(14, 2), nullable=False)
    original_price = Column(Numeric(14, 2), nullable=False)
    discount = Column(String(64), nullable=True)
    video_url = Column(String(512), nullable=True)
    published = Column(Boolean, nullable=False, default=False)
    date_published = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    # positions may be sparse after deletes, so order by value rather than assume 0..n-1
    images = relationship(
        "Image",
        back_populates="laptop",
        order_by="Image.position",
        cascade="all, delete-orphan",
    )
