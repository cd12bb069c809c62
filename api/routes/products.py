"""
api/routes/products.py -- Product CRUD and image upload routes.

Routes:
  GET    /api/products              -- list products, newest first (public)
  GET    /api/products/{id}         -- product detail (public)
  POST   /api/products              -- create (requires auth)
  PUT    /api/products/{id}         -- update the fields sent (requires auth)
  DELETE /api/products/{id}         -- delete (requires auth)
  POST   /api/products/{id}/image   -- attach an image, multipart field "file" (requires auth)

Audit:
  Every successful mutation schedules exactly one audit entry via
  BackgroundTasks (product.create / product.update / product.delete /
  product.upload, entity "product"). The entry is written after the response
  has been produced; a failed write is logged by AuditLogger and never
  changes the response.

  Requests rejected by the auth gate never reach the handler, so they change
  nothing and leave no audit entry.
"""

from __future__ import annotations

from fastapi import APIRouter, BackgroundTasks, Depends, File, HTTPException, Path, Request, Response, UploadFile
from sqlalchemy.exc import IntegrityError

from api.models import ImageUploadResponse, ProductCreate, ProductResponse, ProductUpdate
from audit.logger import AuditLogger
from auth.dependencies import require_user_id
from inventory.images import ImageRejectedError, ImageStorage, ImageTooLargeError
from inventory.models import Product
from inventory.store import ProductStore

router = APIRouter()

_ENTITY = "product"

# Largest value SQLite can bind as INTEGER; bigger ids are rejected with 400.
_MAX_ID = 2**63 - 1


def _not_found() -> HTTPException:
    return HTTPException(status_code=404, detail={"code": "not_found", "message": "product not found"})


def _sku_conflict() -> HTTPException:
    return HTTPException(status_code=409, detail={"code": "conflict", "message": "sku already exists"})


# ---------------------------------------------------------------------------
# Reads (public)
# ---------------------------------------------------------------------------


@router.get("/products", response_model=list[ProductResponse])
def list_products(request: Request) -> list[ProductResponse]:
    store: ProductStore = request.app.state.products
    return [ProductResponse.from_product(p) for p in store.list_products()]


@router.get("/products/{product_id}", response_model=ProductResponse)
def get_product(request: Request, product_id: int = Path(le=_MAX_ID)) -> ProductResponse:
    store: ProductStore = request.app.state.products
    product = store.get_product(product_id)
    if product is None:
        raise _not_found()
    return ProductResponse.from_product(product)


# ---------------------------------------------------------------------------
# Mutations (auth gate + audit)
# ---------------------------------------------------------------------------


@router.post("/products", response_model=ProductResponse, status_code=201)
def create_product(
    request: Request,
    body: ProductCreate,
    background_tasks: BackgroundTasks,
    user_id: int = Depends(require_user_id),
) -> ProductResponse:
    store: ProductStore = request.app.state.products
    audit: AuditLogger = request.app.state.audit
    try:
        product_id = store.create_product(Product(name=body.name, sku=body.sku, price=body.price, stock=body.stock))
    except IntegrityError as exc:
        raise _sku_conflict() from exc
    created = store.get_product(product_id)
    background_tasks.add_task(
        audit.record, user_id, "product.create", _ENTITY, product_id, body.model_dump(mode="json")
    )
    return ProductResponse.from_product(created)


@router.put("/products/{product_id}", response_model=ProductResponse)
def update_product(
    request: Request,
    body: ProductUpdate,
    background_tasks: BackgroundTasks,
    product_id: int = Path(le=_MAX_ID),
    user_id: int = Depends(require_user_id),
) -> ProductResponse:
    store: ProductStore = request.app.state.products
    audit: AuditLogger = request.app.state.audit
    fields = {k: v for k, v in body.model_dump(exclude_unset=True).items() if v is not None}
    if not fields:
        raise HTTPException(status_code=400, detail={"code": "no_changes", "message": "No fields to update."})
    try:
        updated = store.update_product(product_id, **fields)
    except IntegrityError as exc:
        raise _sku_conflict() from exc
    if not updated:
        raise _not_found()
    payload = body.model_dump(mode="json", include=set(fields))
    background_tasks.add_task(audit.record, user_id, "product.update", _ENTITY, product_id, payload)
    return ProductResponse.from_product(store.get_product(product_id))


@router.delete("/products/{product_id}", status_code=204)
def delete_product(
    request: Request,
    background_tasks: BackgroundTasks,
    product_id: int = Path(le=_MAX_ID),
    user_id: int = Depends(require_user_id),
) -> Response:
    store: ProductStore = request.app.state.products
    audit: AuditLogger = request.app.state.audit
    existing = store.get_product(product_id)
    if existing is None or not store.delete_product(product_id):
        raise _not_found()
    background_tasks.add_task(
        audit.record, user_id, "product.delete", _ENTITY, product_id, {"sku": existing.sku, "name": existing.name}
    )
    return Response(status_code=204)


@router.post("/products/{product_id}/image", response_model=ImageUploadResponse)
def upload_image(
    request: Request,
    background_tasks: BackgroundTasks,
    product_id: int = Path(le=_MAX_ID),
    file: UploadFile | None = File(default=None),
    user_id: int = Depends(require_user_id),
) -> ImageUploadResponse:
    """Store an image (<= MAX_UPLOAD_BYTES, image/* only) and set it as the product's image."""
    if file is None:
        raise HTTPException(status_code=400, detail={"code": "invalid_param", "message": "file is required"})
    store: ProductStore = request.app.state.products
    images: ImageStorage = request.app.state.images
    audit: AuditLogger = request.app.state.audit

    if store.get_product(product_id) is None:
        raise _not_found()

    # Size guard -- read up to the limit + 1 byte so oversized uploads are detected
    data = file.file.read(images.max_bytes + 1)
    content_type = file.content_type or ""
    try:
        url = images.save(product_id, file.filename or "", content_type, data)
    except ImageTooLargeError as exc:
        raise HTTPException(status_code=413, detail={"code": "file_too_large", "message": str(exc)}) from exc
    except ImageRejectedError as exc:
        raise HTTPException(status_code=400, detail={"code": "invalid_file", "message": str(exc)}) from exc

    if not store.update_product(product_id, image_url=url):
        raise _not_found()
    background_tasks.add_task(
        audit.record, user_id, "product.upload", _ENTITY, product_id, {"imageUrl": url, "contentType": content_type}
    )
    return ImageUploadResponse(image_url=url)
