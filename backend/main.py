# backend/main.py
import logging
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from config import settings
from database import init_db

# Import routerów
from routes.auth import router as auth_router
from routes.products import router as products_router

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# Inicjalizacja
init_db()

app = FastAPI(title="Product Admin API", version="1.0.0")

# Public disk - served as /storage/<key>, the same prefix the list's image column uses
storage_root = Path(settings.STORAGE_ROOT)
storage_root.mkdir(parents=True, exist_ok=True)
app.mount(
    "/" + settings.STORAGE_URL_PREFIX.strip("/"),
    StaticFiles(directory=str(storage_root)),
    name="storage",
)

# CORS Configuration
origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]
if settings.FRONTEND_URL:
    origins.append(settings.FRONTEND_URL)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Rejestracja routerów
app.include_router(auth_router)
app.include_router(products_router)

@app.get("/")
def read_root():
    return {"message": "Product Admin API is running"}
