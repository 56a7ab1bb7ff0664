import base64
import logging
import os
import secrets
from pathlib import Path
from typing import Optional

import httpx
from fastapi import Depends, FastAPI, File, Form, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel, ValidationError as SchemaError
from pymongo.errors import DuplicateKeyError, PyMongoError

from config import settings
from database import Store, get_store
from errors import (
    NotFound,
    Unauthorized,
    ValidationError,
    describe_errors,
    error_response,
    register_error_handlers,
)
from fetch import get_http_client
from media import resolve_image
from schemas import LoginRequest, Order, Product, Subpage, Theme, User
from tracking import fetch_tracking

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

COLLECTIONS = {
    Product: "products",
    Subpage: "subpages",
    User: "users",
    Order: "orders",
    Theme: "themes",
}

app = FastAPI(title="Artemia Shop API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

Path(settings.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")

# Utils

def build(model: type[BaseModel], **fields) -> dict:
    try:
        return model(**fields).model_dump()
    except SchemaError as e:
        raise ValidationError("Missing or invalid fields", describe_errors(e.errors())) from e


def admin_authorized(header: Optional[str]) -> bool:
    if not settings.ADMIN_PASSWORD or not header:
        return False
    token = base64.b64encode(f"{settings.ADMIN_USERNAME}:{settings.ADMIN_PASSWORD}".encode()).decode()
    return secrets.compare_digest(header.encode(), f"Basic {token}".encode())


def public_file(name: str) -> FileResponse:
    path = Path(settings.PUBLIC_DIR) / name
    if not path.is_file():
        raise NotFound(f"{name} not found")
    return FileResponse(path)


@app.middleware("http")
async def admin_gate(request: Request, call_next):
    path = request.url.path
    if path == "/admin" or path.startswith("/admin/"):
        if not admin_authorized(request.headers.get("authorization")):
            logger.warning("Rejected admin request from %s", request.client.host if request.client else "unknown")
            return error_response(
                Unauthorized("Admin credentials required"),
                headers={"WWW-Authenticate": 'Basic realm="admin"'},
            )
    return await call_next(request)


@app.on_event("startup")
async def connect_store():
    try:
        store = await get_store()
        await store.ping()
        await store.ensure_indexes()
        logger.info("MongoDB connected")
    except PyMongoError as e:
        logger.error("MongoDB connection error: %s", e)


@app.get("/api/test")
async def test(store: Store = Depends(get_store)):
    try:
        colls = await store.db.list_collection_names()
        return {
            "backend": "✅ Running",
            "database": "✅ Available",
            "database_url": "✅ Set" if os.getenv("MONGODB_URI") else "❌ Not Set (using default)",
            "database_name": store.db.name,
            "collections": colls,
        }
    except PyMongoError as e:
        return {"backend": "✅ Running", "database": "❌ Not Available", "error": str(e)}

# Products

@app.get("/api/products")
async def list_products(store: Store = Depends(get_store)):
    return await store.get_documents(COLLECTIONS[Product])


@app.post("/api/products", status_code=201)
async def create_product(
    name: str = Form(...),
    price: float = Form(...),
    category: str = Form(...),
    url: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    store: Store = Depends(get_store),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    doc = build(Product, name=name, price=price, category=category)
    doc["image"] = await resolve_image(client, image, url)
    return await store.create_document(COLLECTIONS[Product], doc)


@app.put("/api/products/{product_id}")
async def update_product(
    product_id: str,
    name: str = Form(...),
    price: float = Form(...),
    category: str = Form(...),
    url: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    store: Store = Depends(get_store),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    if await store.get_document(COLLECTIONS[Product], product_id) is None:
        raise NotFound("Product not found")
    doc = build(Product, name=name, price=price, category=category)
    doc["image"] = await resolve_image(client, image, url)
    updated = await store.update_document(COLLECTIONS[Product], product_id, doc)
    if updated is None:
        raise NotFound("Product not found")
    return updated


@app.delete("/api/products/{product_id}")
async def delete_product(product_id: str, store: Store = Depends(get_store)):
    if not await store.delete_document(COLLECTIONS[Product], product_id):
        raise NotFound("Product not found")
    return {"message": "Product deleted"}

# Subpages

@app.get("/api/subpages")
async def list_subpages(store: Store = Depends(get_store)):
    return await store.get_documents(COLLECTIONS[Subpage])


@app.post("/api/subpages", status_code=201)
async def create_subpage(payload: Subpage, store: Store = Depends(get_store)):
    return await store.create_document(COLLECTIONS[Subpage], payload.model_dump())


@app.put("/api/subpages/{subpage_id}")
async def update_subpage(subpage_id: str, payload: Subpage, store: Store = Depends(get_store)):
    updated = await store.update_document(COLLECTIONS[Subpage], subpage_id, payload.model_dump())
    if updated is None:
        raise NotFound("Subpage not found")
    return updated


@app.delete("/api/subpages/{subpage_id}")
async def delete_subpage(subpage_id: str, store: Store = Depends(get_store)):
    if not await store.delete_document(COLLECTIONS[Subpage], subpage_id):
        raise NotFound("Subpage not found")
    return {"message": "Subpage deleted"}

# Theme (single document)

@app.get("/api/theme")
async def get_theme(store: Store = Depends(get_store)):
    return await store.find_one(COLLECTIONS[Theme], {}) or {}


@app.post("/api/theme")
async def save_theme(
    color: str = Form(...),
    name: str = Form(...),
    url: Optional[str] = Form(None),
    logo: Optional[UploadFile] = File(None),
    store: Store = Depends(get_store),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    doc = build(Theme, color=color, name=name)
    doc["logo"] = await resolve_image(client, logo, url)
    return await store.upsert_singleton(COLLECTIONS[Theme], doc)

# Users

@app.get("/api/users")
async def list_users(store: Store = Depends(get_store)):
    return await store.get_documents(COLLECTIONS[User])


@app.post("/api/users", status_code=201)
async def create_user(payload: User, store: Store = Depends(get_store)):
    if await store.find_one(COLLECTIONS[User], {"username": payload.username}):
        raise ValidationError("Username already exists")
    try:
        return await store.create_document(COLLECTIONS[User], payload.model_dump())
    except DuplicateKeyError as e:
        raise ValidationError("Username already exists") from e


@app.delete("/api/users/{user_id}")
async def delete_user(user_id: str, store: Store = Depends(get_store)):
    if not await store.delete_document(COLLECTIONS[User], user_id):
        raise NotFound("User not found")
    return {"message": "User deleted"}


@app.post("/api/login")
async def login(payload: LoginRequest, store: Store = Depends(get_store)):
    # Plain-text match; the stored password is returned with the user as well
    user = await store.find_one(
        COLLECTIONS[User], {"username": payload.username, "password": payload.password}
    )
    if not user:
        raise Unauthorized("Invalid username or password")
    return {"message": "Login successful", "user": user}

# Orders

@app.get("/api/orders")
async def list_orders(store: Store = Depends(get_store)):
    return await store.get_documents(COLLECTIONS[Order])


@app.post("/api/orders", status_code=201)
async def create_order(payload: Order, store: Store = Depends(get_store)):
    return await store.create_document(COLLECTIONS[Order], payload.model_dump())


@app.get("/api/track/{order_code}")
async def track_order(order_code: str, client: httpx.AsyncClient = Depends(get_http_client)):
    return await fetch_tracking(client, order_code)

# Frontend

@app.get("/admin")
async def admin_page():
    return public_file("admin.html")


@app.api_route("/api/{full_path:path}", methods=["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"])
async def unknown_api_route(full_path: str):
    raise NotFound("Route not found")


@app.get("/{full_path:path}")
async def storefront(full_path: str):
    if full_path == "api":
        raise NotFound("Route not found")
    # Assets under PUBLIC_DIR are served as-is; admin.html only through the gated /admin
    public_dir = Path(settings.PUBLIC_DIR).resolve()
    asset = (public_dir / full_path).resolve()
    if full_path and asset.is_file() and asset.is_relative_to(public_dir) and asset.name != "admin.html":
        return FileResponse(asset)
    return public_file("index.html")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.PORT)
