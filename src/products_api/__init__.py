"""Products API: product CRUD over a document store and S3 image storage."""
