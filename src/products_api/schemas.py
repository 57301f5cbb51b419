####################################
# --- Request/response schemas --- #
####################################

import os
from typing import Any, Dict, List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
)

ALLOWED_IMAGE_EXTENSIONS = ("jpg", "jpeg", "png", "gif")
ALLOWED_IMAGE_CONTENT_TYPES = ("image/jpeg", "image/png", "image/gif")
DEFAULT_MAX_IMAGE_SIZE_BYTES = 2048 * 1024

REPLACE_IMAGES_TOKENS = ("true", "false", "0", "1", "on", "off")
TRUTHY_TOKENS = ("true", "1", "on")


class ImageUpload(BaseModel):
    """An uploaded image file, fully read into memory."""
    filename: str
    content_type: Optional[str] = None
    content: bytes = Field(repr=False)

    @property
    def size(self) -> int:
        return len(self.content)

    @field_validator("filename")
    @classmethod
    def check_extension(cls, v: str) -> str:
        extension = os.path.splitext(v)[1].lstrip(".").lower()
        if extension not in ALLOWED_IMAGE_EXTENSIONS:
            raise ValueError(f"must be a file of type: {', '.join(ALLOWED_IMAGE_EXTENSIONS)}")
        return v

    @field_validator("content_type")
    @classmethod
    def check_content_type(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v.lower() not in ALLOWED_IMAGE_CONTENT_TYPES:
            raise ValueError(f"must be a file of type: {', '.join(ALLOWED_IMAGE_EXTENSIONS)}")
        return v

    @field_validator("content")
    @classmethod
    def check_size(cls, v: bytes, info: ValidationInfo) -> bytes:
        if not v:
            raise ValueError("must be a non-empty file")
        max_size = (info.context or {}).get("max_image_size_bytes", DEFAULT_MAX_IMAGE_SIZE_BYTES)
        if len(v) > max_size:
            raise ValueError(f"may not be greater than {max_size // 1024} kilobytes")
        return v


class ProductCreate(BaseModel):
    """Validated payload for `POST /products`."""
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    price: float = Field(allow_inf_nan=False)
    images: List[ImageUpload] = Field(default_factory=list)

    model_config = ConfigDict(str_strip_whitespace=True)

    @field_validator("description")
    @classmethod
    def blank_description_to_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None

    def scalar_fields(self) -> Dict[str, Any]:
        return self.model_dump(exclude={"images"})


class ProductUpdate(BaseModel):
    """Validated payload for `POST /products/{id}/update`. Every field is optional."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    price: Optional[float] = Field(None, allow_inf_nan=False)
    images: List[ImageUpload] = Field(default_factory=list)
    replace_images: Optional[str] = None

    model_config = ConfigDict(str_strip_whitespace=True)

    @field_validator("description")
    @classmethod
    def blank_description_to_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None

    @field_validator("replace_images")
    @classmethod
    def check_replace_images(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in REPLACE_IMAGES_TOKENS:
            raise ValueError(f"must be one of: {', '.join(REPLACE_IMAGES_TOKENS)}")
        return v

    @property
    def should_replace_images(self) -> bool:
        return self.replace_images is not None and self.replace_images in TRUTHY_TOKENS

    def scalar_fields(self) -> Dict[str, Any]:
        """
        Scalar fields that were supplied, ready to merge into the stored record.

        A description passed explicitly as None is kept so the stored value is
        cleared; name and price are never cleared.
        """
        fields = self.model_dump(exclude={"images", "replace_images"}, exclude_unset=True)
        return {key: value for key, value in fields.items() if value is not None or key == "description"}


class Product(BaseModel):
    """A product record as stored in the document store."""
    id: str
    name: str
    description: Optional[str] = None
    price: float
    images: List[str] = Field(default_factory=list)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "66f1c2a9e4b0a1d2c3e4f5a6",
                "name": "Ceramic mug",
                "description": "350ml, dishwasher safe",
                "price": 12.5,
                "images": [
                    "https://products-images.s3.us-east-1.amazonaws.com/products/66f1c2a9e4b0a1d2c3e4f5a6/1729245000_3f9a1c2e_mug.png"
                ],
            }
        }
    )


class CreateProductResponse(BaseModel):
    """Response model for `POST /products`."""
    message: str
    data: Product


class UpdateProductResponse(BaseModel):
    """Response model for `POST /products/{id}/update`."""
    message: str
    updated: Product


class DeleteProductResponse(BaseModel):
    """Response model for `DELETE /products/{id}`."""
    message: str


class ErrorResponse(BaseModel):
    message: str
    errors: Optional[Dict[str, List[str]]] = None
