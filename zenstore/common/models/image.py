from sqlalchemy import CheckConstraint, Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from .base import Base


class Image(Base):
    """Product image; `position` is a sort key unique within one laptop."""

    __tablename__ = "image"

    id = Column(Integer, primary_key=True, autoincrement=True)
    url = Column(String(1024), nullable=False)
    alt = Column(String(255), nullable=True)
    position = Column(Integer, nullable=False, default=0)
    laptop_id = Column(Integer, ForeignKey("laptop.id", ondelete="CASCADE"), nullable=False, index=True)

    laptop = relationship("Laptop", back_populates="images")

    __table_args__ = (
        CheckConstraint("position >= 0", name="image_position_non_negative"),
    )

    def __repr__(self):
        return f"<Image(id={self.id}, laptop_id={self.laptop_id}, position={self.position})>"
