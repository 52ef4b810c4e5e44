# backend/models/category.py
from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship
from database import Base

# Product category. Managed outside the product panel; here it is only
# read (select options, list column, search).
class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)

    products = relationship("Product", back_populates="category")
