import boto3
import pytest
from fastapi.testclient import TestClient
from moto import mock_aws

from database.nosql_adapter import SQLiteDocumentStore
from products_api.adapters.storage import ObjectStorage
from products_api.config.settings import Settings, get_settings
from products_api.main import create_app
from tests.consts import TEST_BUCKET_NAME, TEST_COLLECTION, TEST_REGION


@pytest.fixture
def aws_credentials(monkeypatch):
    """Fake credentials so boto3 never talks to a real account."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", TEST_REGION)
    monkeypatch.delenv("AWS_ENDPOINT_URL", raising=False)


@pytest.fixture
def mocked_aws(aws_credentials):
    """An in-process S3 with the test bucket already created."""
    with mock_aws():
        s3_client = boto3.client("s3", region_name=TEST_REGION)
        s3_client.create_bucket(Bucket=TEST_BUCKET_NAME)
        yield s3_client


@pytest.fixture
def db_path(tmp_path) -> str:
    return str(tmp_path / "test_products.db")


@pytest.fixture
def settings(db_path, aws_credentials) -> Settings:
    return Settings(
        _env_file=None,
        deployment_mode="aws-prod",
        document_store="sqlite",
        sqlite_db_path=db_path,
        s3_bucket_name=TEST_BUCKET_NAME,
        aws_region=TEST_REGION,
    )


@pytest.fixture
def document_store(db_path) -> SQLiteDocumentStore:
    store = SQLiteDocumentStore(db_path)
    store.init_collections([TEST_COLLECTION])
    return store


@pytest.fixture
def object_storage(mocked_aws) -> ObjectStorage:
    return ObjectStorage(bucket_name=TEST_BUCKET_NAME, s3_client=mocked_aws, region=TEST_REGION)


@pytest.fixture
def client(settings, document_store, object_storage):
    app = create_app(settings=settings, document_store=document_store, object_storage=object_storage)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
