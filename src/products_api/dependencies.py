"""FastAPI dependencies that hand out the clients created at startup."""

from fastapi import Request

from products_api.config.settings import Settings
from products_api.services.product_service import ProductService


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_product_service(request: Request) -> ProductService:
    return request.app.state.product_service
