from dataclasses import dataclass
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session
from starlette.datastructures import UploadFile

from app.core.constants import DEFAULT_CATALOG_PATH, FLASH_SESSION_KEY
from app.core.errors import (
    ProductDeleteConflictError,
    ProductNotFoundError,
    ProductValidationError,
)
from app.dependencies import get_db, get_photo_storage
from app.services.photo_storage import PhotoStorage, PhotoUpload
from app.services.product_service import (
    build_product_form,
    create_product,
    delete_product,
    get_product_view,
    list_categories,
    list_model_options,
    list_products,
    prepare_delete,
    update_product,
)

router = APIRouter(prefix="/products", tags=["Products"])

PRODUCT_FORM_FIELDS = (
    "name",
    "product_number",
    "list_price",
    "size",
    "color",
    "standard_cost",
    "weight",
    "product_category_id",
    "product_model_id",
    "sell_end_date",
    "discontinued_date",
)


@dataclass
class ProductSubmission:
    values: dict[str, str]
    photo: Optional[PhotoUpload] = None
    product_id: Optional[str] = None


async def read_product_submission(request: Request) -> ProductSubmission:
    form = await request.form()
    values = {}
    for field in PRODUCT_FORM_FIELDS:
        value = form.get(field)
        if isinstance(value, str):
            values[field] = value

    photo = None
    upload = form.get("photo")
    # Browsers send an empty part with no filename when no file was chosen.
    if isinstance(upload, UploadFile) and upload.filename:
        photo = PhotoUpload(content=await upload.read(), filename=upload.filename)

    product_id = form.get("product_id")
    return ProductSubmission(
        values=values,
        photo=photo,
        product_id=product_id if isinstance(product_id, str) and product_id else None,
    )


def _flash(request: Request, message: str) -> None:
    request.session[FLASH_SESSION_KEY] = message


def _redirect_to_table() -> RedirectResponse:
    return RedirectResponse(url=DEFAULT_CATALOG_PATH, status_code=303)


def _render_form(
    request: Request,
    db: Session,
    *,
    values: dict[str, Any],
    errors: Optional[dict[str, str]] = None,
    product=None,
    status_code: int = 200,
):
    templates = request.app.state.templates
    return templates.TemplateResponse(
        request,
        "products/form.html",
        {
            "product": product,
            "values": values,
            "errors": errors or {},
            "categories": list_categories(db),
            "models": list_model_options(db),
        },
        status_code=status_code,
    )


@router.get("", response_class=HTMLResponse)
def product_table(request: Request, db: Session = Depends(get_db)):
    templates = request.app.state.templates
    return templates.TemplateResponse(
        request,
        "products/table.html",
        {
            "products": list_products(db),
            "flash": request.session.pop(FLASH_SESSION_KEY, None),
        },
    )


@router.get("/create", response_class=HTMLResponse)
def create_page(request: Request, db: Session = Depends(get_db)):
    return _render_form(request, db, values={})


@router.post("/create", response_class=HTMLResponse)
def create_submit(
    request: Request,
    submission: ProductSubmission = Depends(read_product_submission),
    db: Session = Depends(get_db),
    storage: PhotoStorage = Depends(get_photo_storage),
):
    try:
        form = build_product_form(submission.values)
        product = create_product(db, form, submission.photo, storage=storage)
    except ProductValidationError as exc:
        return _render_form(
            request,
            db,
            values=submission.values,
            errors=exc.errors,
            status_code=422,
        )
    _flash(request, f"Product '{product.name}' created.")
    return _redirect_to_table()


@router.get("/{product_id}", response_class=HTMLResponse)
def product_details(product_id: int, request: Request, db: Session = Depends(get_db)):
    try:
        view = get_product_view(db, product_id)
    except ProductNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Product not found.") from exc
    templates = request.app.state.templates
    return templates.TemplateResponse(request, "products/details.html", {"product": view})


@router.get("/{product_id}/edit", response_class=HTMLResponse)
def edit_page(product_id: int, request: Request, db: Session = Depends(get_db)):
    try:
        view = get_product_view(db, product_id, with_order_count=True)
    except ProductNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Product not found.") from exc
    return _render_form(request, db, values=view.model_dump(), product=view)


@router.post("/{product_id}/edit", response_class=HTMLResponse)
def edit_submit(
    product_id: int,
    request: Request,
    submission: ProductSubmission = Depends(read_product_submission),
    db: Session = Depends(get_db),
    storage: PhotoStorage = Depends(get_photo_storage),
):
    if submission.product_id != str(product_id):
        raise HTTPException(status_code=404, detail="Product not found.")

    try:
        form = build_product_form(submission.values)
        update_product(db, product_id, form, submission.photo, storage=storage)
    except ProductNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Product not found.") from exc
    except ProductValidationError as exc:
        try:
            view = get_product_view(db, product_id, with_order_count=True)
        except ProductNotFoundError as missing:
            raise HTTPException(status_code=404, detail="Product not found.") from missing
        return _render_form(
            request,
            db,
            values=submission.values,
            errors=exc.errors,
            product=view,
            status_code=422,
        )
    return _redirect_to_table()


@router.get("/{product_id}/delete", response_class=HTMLResponse)
def delete_page(product_id: int, request: Request, db: Session = Depends(get_db)):
    try:
        view = prepare_delete(db, product_id)
    except ProductNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Product not found.") from exc
    except ProductDeleteConflictError as exc:
        _flash(request, exc.message)
        return _redirect_to_table()
    templates = request.app.state.templates
    return templates.TemplateResponse(request, "products/delete.html", {"product": view})


@router.post("/{product_id}/delete")
def delete_confirmed(
    product_id: int,
    request: Request,
    db: Session = Depends(get_db),
    storage: PhotoStorage = Depends(get_photo_storage),
):
    try:
        delete_product(db, product_id, storage=storage)
    except ProductDeleteConflictError as exc:
        _flash(request, exc.message)
    return _redirect_to_table()


__all__ = ["router"]
