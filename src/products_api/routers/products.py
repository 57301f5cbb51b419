from typing import Any, Dict, List, Optional

from fastapi import (
    APIRouter,
    Depends,
    File,
    Form,
    Path,
    Request,
    UploadFile,
    status
)

from products_api.config.settings import Settings
from products_api.dependencies import get_app_settings, get_product_service
from products_api.schemas import (
    CreateProductResponse,
    DeleteProductResponse,
    ErrorResponse,
    Product,
    ProductCreate,
    ProductUpdate,
    UpdateProductResponse,
)
from products_api.services.product_service import ProductService

router = APIRouter()

NOT_FOUND_RESPONSE = {
    status.HTTP_404_NOT_FOUND: {
        "description": "No product exists with the given `product_id`.",
        "model": ErrorResponse,
    },
}
VALIDATION_RESPONSE = {
    status.HTTP_422_UNPROCESSABLE_ENTITY: {
        "description": "Field-level validation errors.",
        "model": ErrorResponse,
    },
}


async def _read_images(max_size: int, *file_lists: Optional[List[UploadFile]]) -> List[Dict[str, Any]]:
    """
    Read uploaded files into memory, skipping empty file inputs.

    At most ``max_size + 1`` bytes are read per file, enough for validation
    to reject anything over the limit.
    """
    uploads = []
    for images in file_lists:
        for image in images or []:
            if not image.filename:
                continue
            uploads.append({
                "filename": image.filename,
                "content_type": image.content_type,
                "content": await image.read(max_size + 1),
            })
    return uploads


def _validation_context(settings: Settings) -> Dict[str, Any]:
    return {"max_image_size_bytes": settings.max_image_size_bytes}


def _supplied(**fields: Any) -> Dict[str, Any]:
    return {key: value for key, value in fields.items() if value is not None}


async def _sent_empty(request: Request, field: str) -> bool:
    """Whether a form field was present in the request with an empty value."""
    form = await request.form()
    return field in form and not form[field]


@router.get("/products", response_model=List[Product])
async def list_products(
    service: ProductService = Depends(get_product_service),
) -> List[Dict[str, Any]]:
    """Retrieve all products."""
    return service.list_products()


@router.post(
    "/products",
    status_code=status.HTTP_201_CREATED,
    response_model=CreateProductResponse,
    responses=VALIDATION_RESPONSE,
)
async def create_product(
    name: Optional[str] = Form(None, description="Product name, up to 255 characters"),
    description: Optional[str] = Form(None, description="Free-form description"),
    price: Optional[str] = Form(None, description="Numeric price"),
    images: Optional[List[UploadFile]] = File(None, description="jpg, jpeg, png or gif images"),
    images_array: Optional[List[UploadFile]] = File(None, alias="images[]", description="Same as `images`"),
    settings: Settings = Depends(get_app_settings),
    service: ProductService = Depends(get_product_service),
) -> CreateProductResponse:
    """
    Create a product.

    Images are uploaded to object storage under the new product's id and
    their public URLs are stored on the product.
    """
    payload = ProductCreate.model_validate(
        {
            **_supplied(name=name, description=description, price=price),
            "images": await _read_images(settings.max_image_size_bytes, images, images_array),
        },
        context=_validation_context(settings),
    )
    record = service.create_product(payload)
    return CreateProductResponse(message="Data created successfully", data=Product(**record))


@router.get("/products/{product_id}", response_model=Product, responses=NOT_FOUND_RESPONSE)
async def get_product(
    product_id: str = Path(..., description="The ID of the product to retrieve"),
    service: ProductService = Depends(get_product_service),
) -> Dict[str, Any]:
    """Retrieve a single product."""
    return service.get_product(product_id)


@router.post(
    "/products/{product_id}/update",
    response_model=UpdateProductResponse,
    responses={**NOT_FOUND_RESPONSE, **VALIDATION_RESPONSE},
)
async def update_product(
    request: Request,
    product_id: str = Path(..., description="The ID of the product to update"),
    name: Optional[str] = Form(None),
    description: Optional[str] = Form(None, description="Sent empty, clears the description"),
    price: Optional[str] = Form(None),
    replace_images: Optional[str] = Form(
        None,
        description="One of true, false, 0, 1, on, off. When truthy, new images replace the existing ones.",
    ),
    images: Optional[List[UploadFile]] = File(None),
    images_array: Optional[List[UploadFile]] = File(None, alias="images[]"),
    settings: Settings = Depends(get_app_settings),
    service: ProductService = Depends(get_product_service),
) -> UpdateProductResponse:
    """
    Partially update a product.

    Only the fields present in the form are changed, and an empty
    `description` sets it to null. New images are appended unless
    `replace_images` is truthy, in which case the previous images are
    deleted first. A truthy `replace_images` without new images changes nothing.
    """
    fields = _supplied(name=name, description=description, price=price, replace_images=replace_images)
    if description is None and await _sent_empty(request, "description"):
        fields["description"] = None

    payload = ProductUpdate.model_validate(
        {
            **fields,
            "images": await _read_images(settings.max_image_size_bytes, images, images_array),
        },
        context=_validation_context(settings),
    )
    record = service.update_product(product_id, payload)
    return UpdateProductResponse(message="Data updated successfully", updated=Product(**record))


@router.delete("/products/{product_id}", response_model=DeleteProductResponse, responses=NOT_FOUND_RESPONSE)
async def delete_product(
    product_id: str = Path(..., description="The ID of the product to delete"),
    service: ProductService = Depends(get_product_service),
) -> DeleteProductResponse:
    """Delete a product and its images."""
    service.delete_product(product_id)
    return DeleteProductResponse(message="Data deleted successfully")
