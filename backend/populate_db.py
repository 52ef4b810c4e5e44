import os
import sys

# Add 'backend' folder to Python path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
sys.path.append(os.path.abspath(os.path.dirname(__file__)))

from dotenv import load_dotenv

from database import SessionLocal, init_db
from models.category import Category
from models.users import User, ADMIN_ROLE
from utils.hashing import get_password_hash

load_dotenv()

# Configuration
ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@example.com")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "admin")
DEFAULT_CATEGORIES = ["Beverages", "Food", "Household", "Personal Care", "Stationery"]
# End Configuration


def ensure_admin(session) -> User:
    admin = session.query(User).filter(User.email == ADMIN_EMAIL).first()
    if admin:
        print(f"Admin {ADMIN_EMAIL} already exists.")
        return admin
    admin = User(email=ADMIN_EMAIL, password_hash=get_password_hash(ADMIN_PASSWORD), role=ADMIN_ROLE)
    session.add(admin)
    session.commit()
    print(f"Created admin {ADMIN_EMAIL}.")
    return admin


def ensure_categories(session) -> int:
    existing = {name for (name,) in session.query(Category.name).all()}
    to_add = [Category(name=name) for name in DEFAULT_CATEGORIES if name not in existing]
    session.add_all(to_add)
    session.commit()
    print(f"Inserted {len(to_add)} categories.")
    return len(to_add)


def main():
    init_db()
    session = SessionLocal()
    try:
        ensure_admin(session)
        ensure_categories(session)
    finally:
        session.close()


if __name__ == "__main__":
    main()
