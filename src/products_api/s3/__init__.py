"""Thin functions over the S3 API, one module per CRUD verb."""
