import logging
import os
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import List, Optional

import uvicorn
from fastapi import Depends, FastAPI, File, Form, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from pydantic import BaseModel
from pydantic import ValidationError as SchemaError
from pymongo import DESCENDING
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, PyMongoError
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import Settings, load_settings
from database import OWNERS, PROPERTIES, USERS, connect, ensure_indexes, get_database, object_id, serialize_document
from errors import AuthError, ConflictError, NotFoundError, ServerError, ValidationError
from media import CloudinaryUploader
from properties import HOUSE, MAX_PHOTOS, map_link, parse_number, upload_photos
from schemas import Credentials, Owner, Property, User, UserSignup

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    settings: Settings
    db: Database
    uploader: CloudinaryUploader


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = load_settings()
    logging.getLogger().setLevel(settings.log_level)
    client = connect(settings)
    db = get_database(client, settings)
    ensure_indexes(db)
    app.state.context = AppContext(settings=settings, db=db, uploader=CloudinaryUploader(settings))
    logger.info("Serving static files from %s", settings.static_dir)
    try:
        yield
    finally:
        client.close()


app = FastAPI(title="RentEasy API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_context(request: Request) -> AppContext:
    return request.app.state.context


# Error envelope

def _failure(status_code: int, message: str, headers=None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message}, headers=headers)


@app.exception_handler(StarletteHTTPException)
async def http_error(request: Request, exc: StarletteHTTPException):
    return _failure(exc.status_code, str(exc.detail), getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def request_validation_error(request: Request, exc: RequestValidationError):
    return _failure(400, "Invalid request")


@app.exception_handler(Exception)
async def unhandled_error(request: Request, exc: Exception):
    # ServerErrorMiddleware re-raises after this runs, so uvicorn logs the traceback
    return _failure(500, "Server error")


# Request bodies (JSON or url-encoded/multipart form)

async def read_payload(request: Request) -> dict:
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            data = await request.json()
        except ValueError:
            raise ValidationError("Invalid JSON body")
        return data if isinstance(data, dict) else {}
    if content_type.startswith(("application/x-www-form-urlencoded", "multipart/form-data")):
        form = await request.form()
        return {key: value for key, value in form.items() if isinstance(value, str)}
    return {}


def parse_body(model, payload: dict):
    try:
        return model.model_validate(payload)
    except SchemaError:
        raise ValidationError("Invalid request body")


# Auth

def _signup(collection: Collection, account: BaseModel, conflict_message: str, label: str) -> None:
    try:
        if collection.find_one({"phone": account.phone}):
            raise ConflictError(conflict_message)
        collection.insert_one(account.model_dump())
    except DuplicateKeyError:
        raise ConflictError(conflict_message)
    except PyMongoError:
        logger.exception("%s signup error", label)
        raise ServerError()
    logger.info("%s registered", label)


def _login(collection: Collection, body: Credentials, not_found_message: str, label: str) -> dict:
    try:
        account = collection.find_one({"phone": body.phone})
    except PyMongoError:
        logger.exception("%s login error", label)
        raise ServerError()
    if not account:
        raise NotFoundError(not_found_message)
    if account.get("password") != body.password:
        raise AuthError("Incorrect password")
    return serialize_document(account)


@app.post("/api/owner/signup")
def owner_signup(payload: dict = Depends(read_payload), ctx: AppContext = Depends(get_context)):
    body = parse_body(Credentials, payload)
    if not body.phone or not body.password:
        raise ValidationError("Phone and password required")
    _signup(ctx.db[OWNERS], Owner(phone=body.phone, password=body.password), "Owner already exists", "Owner")
    return {"success": True, "message": "Owner registered successfully"}


@app.post("/api/owner/login")
def owner_login(payload: dict = Depends(read_payload), ctx: AppContext = Depends(get_context)):
    body = parse_body(Credentials, payload)
    owner = _login(ctx.db[OWNERS], body, "Owner not found", "Owner")
    return {"success": True, "message": "Login successful", "owner": owner}


@app.post("/api/user/signup")
def user_signup(payload: dict = Depends(read_payload), ctx: AppContext = Depends(get_context)):
    body = parse_body(UserSignup, payload)
    if not body.name or not body.phone or not body.password:
        raise ValidationError("All fields required")
    user = User(name=body.name, phone=body.phone, password=body.password)
    _signup(ctx.db[USERS], user, "User already exists", "User")
    return {"success": True, "message": "User registered successfully"}


@app.post("/api/user/login")
def user_login(payload: dict = Depends(read_payload), ctx: AppContext = Depends(get_context)):
    body = parse_body(Credentials, payload)
    user = _login(ctx.db[USERS], body, "User not found", "User")
    return {"success": True, "message": "Login successful", "user": user}


# Properties

@app.post("/api/upload")
def upload_property(
    property_type: Optional[str] = Form(None, alias="type"),
    owner_name: Optional[str] = Form(None, alias="ownerName"),
    mobile: Optional[str] = Form(None),
    location: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    rent: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    floor: Optional[str] = Form(None),
    kitchen: Optional[str] = Form(None),
    bedroom: Optional[str] = Form(None),
    hall: Optional[str] = Form(None),
    garden: Optional[str] = Form(None),
    water_supply: Optional[str] = Form(None, alias="waterSupply"),
    photos: Optional[List[UploadFile]] = File(None),
    ctx: AppContext = Depends(get_context),
):
    if not property_type:
        raise ValidationError("Property type missing")
    # browsers send an empty, unnamed part when no file was picked
    photos = [p for p in photos or [] if p.filename]
    if not photos:
        raise ValidationError("No images uploaded")
    if len(photos) > MAX_PHOTOS:
        raise ValidationError("Too many files")
    price_value = parse_number("price", price)
    rent_value = parse_number("rent", rent)

    urls = upload_photos(photos, ctx.uploader, ctx.settings.upload_dir, ctx.settings.upload_folder)

    prop = Property(
        type=property_type,
        ownerName=owner_name,
        mobile=mobile,
        location=location,
        price=price_value,
        rent=rent_value,
        description=description,
        floor=floor,
        kitchen=kitchen,
        bedroom=bedroom,
        hall=hall,
        garden=garden,
        waterSupply=water_supply,
        imageUrl=urls,
        mapLink=map_link(location),
    )
    doc = prop.model_dump()
    try:
        ctx.db[PROPERTIES].insert_one(doc)
    except PyMongoError:
        logger.exception("Upload error")
        raise ServerError("Failed to upload property")
    logger.info("Property %s created with %d photos", doc["_id"], len(urls))
    return {"success": True, "message": "Property uploaded successfully!", "property": serialize_document(doc)}


@app.get("/api/houses")
def list_houses(ctx: AppContext = Depends(get_context)):
    try:
        cursor = ctx.db[PROPERTIES].find({"type": HOUSE}).sort("date", DESCENDING)
        houses = [serialize_document(d) for d in cursor]
    except PyMongoError:
        logger.exception("Fetch error")
        raise ServerError("Failed to fetch houses")
    return {"success": True, "houses": houses}


@app.delete("/api/property/{prop_id}")
def delete_property(prop_id: str, ctx: AppContext = Depends(get_context)):
    oid = object_id(prop_id)
    if oid is None:
        raise NotFoundError("Property not found")
    try:
        res = ctx.db[PROPERTIES].delete_one({"_id": oid})
    except PyMongoError:
        logger.exception("Delete error")
        raise ServerError("Failed to delete property")
    if res.deleted_count == 0:
        raise NotFoundError("Property not found")
    logger.info("Property %s deleted", prop_id)
    return {"success": True, "message": "Property deleted successfully"}


# Frontend: static files from the working directory, index.html for everything else

@app.get("/{full_path:path}", include_in_schema=False)
def frontend(full_path: str, ctx: AppContext = Depends(get_context)):
    root = os.path.realpath(ctx.settings.static_dir)
    hidden = any(part.startswith(".") for part in full_path.split("/") if part)
    if full_path and not hidden:
        candidate = os.path.realpath(os.path.join(root, full_path))
        if candidate.startswith(root + os.sep) and os.path.isfile(candidate):
            return FileResponse(candidate)
    index = os.path.join(root, "index.html")
    if not os.path.isfile(index):
        raise NotFoundError("Not found")
    return FileResponse(index)


def run():
    settings = load_settings()
    logger.info("Server starting on port %s", settings.port)
    uvicorn.run("main:app", host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
