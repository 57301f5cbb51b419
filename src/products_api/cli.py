# cli.py
import logging

import click

from products_api.adapters.storage import ObjectStorage
from products_api.config.settings import get_settings
from products_api.main import build_document_store, configure_logging

# Configure logging
logger = logging.getLogger(__name__)

@click.group()
def cli():
    """CLI commands for the Products API"""
    configure_logging(get_settings())

@cli.command()
def show_config():
    """Show current configuration"""
    settings = get_settings()

    click.echo("Current Configuration:")
    click.echo(f"  Deployment Mode: {settings.deployment_mode}")
    click.echo(f"  AWS Region: {settings.aws_region}")
    click.echo(f"  AWS Endpoint: {settings.aws_endpoint_url}")
    click.echo(f"  S3 Bucket: {settings.s3_bucket_name}")
    click.echo(f"  Public Base URL: {settings.public_base_url}")
    click.echo(f"  Document Store: {settings.document_store}")
    if settings.document_store == "sqlite":
        click.echo(f"  SQLite Database: {settings.sqlite_db_path}")
    click.echo(f"  Products Collection: {settings.products_collection}")
    click.echo(f"  Max Image Size: {settings.max_image_size_kb} KB")

@cli.command()
@click.option("--skip-bucket", is_flag=True, help="Do not create the S3 bucket")
def init_store(skip_bucket):
    """Create the S3 bucket and document store collections"""
    settings = get_settings()

    document_store = build_document_store(settings)
    document_store.close()
    click.echo(f"Document store ready ({settings.document_store})")

    if not skip_bucket:
        ObjectStorage.from_settings(settings).ensure_bucket()
        click.echo(f"Bucket ready: {settings.s3_bucket_name}")

@cli.command()
@click.option("--host", default="0.0.0.0", help="Interface to bind")
@click.option("--port", default=8000, type=int, help="Port to listen on")
@click.option("--reload", is_flag=True, help="Reload on code changes")
def serve(host, port, reload):
    """Run the API with uvicorn"""
    import uvicorn

    logger.info(f"Starting Products API on {host}:{port}")
    uvicorn.run("products_api.main:create_app", factory=True, host=host, port=port, reload=reload)

if __name__ == "__main__":
    cli()
