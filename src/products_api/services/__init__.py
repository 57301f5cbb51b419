"""
Products API service layer.

Business operations that sit between the HTTP routers and the storage
adapters.
"""

from .product_service import ProductService

__all__ = ["ProductService"]
