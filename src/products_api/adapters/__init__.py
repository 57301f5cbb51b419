"""
Adapter layer for the Products API.

Contains the object storage adapter (S3) used for product images.
"""
