# backend/models/users.py
from sqlalchemy import Column, Integer, String
from database import Base

ADMIN_ROLE = "admin"

# Account able to sign in to the admin panel.
# Only users with role == ADMIN_ROLE may manage products.
class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    role = Column(String, nullable=False, default=ADMIN_ROLE)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)

    @property
    def is_admin(self) -> bool:
        return (self.role or "").lower() == ADMIN_ROLE
