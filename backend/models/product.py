# backend/models/product.py
from sqlalchemy import Column, Integer, String, ForeignKey, Numeric, DateTime, func
from sqlalchemy.orm import relationship
from database import Base

# Model Product
# A single product managed from the admin panel.
# price_sell is never taken from the user; it is derived from price_buy
# when the record is saved (see utils.pricing).
class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True, index=True)

    # The unique index backs up the validator's uniqueness check.
    name = Column(String, unique=True, nullable=False, index=True)

    # Money columns use fixed-point storage, so price derivation stays in Decimal.
    price_buy = Column(Numeric(12, 2), nullable=False)
    price_sell = Column(Numeric(12, 2), nullable=False)

    stock = Column(Numeric(12, 2), nullable=False)

    # Key of the stored image on the public disk, e.g. "products/<uuid>.jpg".
    image_path = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    category = relationship("Category", back_populates="products", lazy="joined")
