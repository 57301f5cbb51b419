import re

import boto3
import pytest
from moto import mock_aws

from products_api.adapters.storage import ObjectStorage
from products_api.s3.read_objects import object_exists_in_s3
from tests.consts import TEST_BUCKET_NAME, TEST_REGION
from tests.fixtures.product_fixtures import image_upload, object_key_from_url

ALL_USERS_URI = "http://acs.amazonaws.com/groups/global/AllUsers"


def test_upload_stores_under_folder_and_reference(object_storage: ObjectStorage, mocked_aws):
    url = object_storage.upload(image_upload("mug.png"), "products", "p1")

    key = object_key_from_url(url)
    assert re.fullmatch(r"products/p1/\d+_[0-9a-f]{8}_mug\.png", key)
    assert url.startswith(f"https://{TEST_BUCKET_NAME}.s3.{TEST_REGION}.amazonaws.com/products/p1/")

    stored = mocked_aws.get_object(Bucket=TEST_BUCKET_NAME, Key=key)
    assert stored["Body"].read() == image_upload().content
    assert stored["ContentType"] == "image/png"


def test_same_name_uploads_get_distinct_keys(object_storage: ObjectStorage, mocked_aws):
    first = object_storage.upload(image_upload("mug.png"), "products", "p1")
    second = object_storage.upload(image_upload("mug.png"), "products", "p1")

    assert first != second
    assert object_exists_in_s3(TEST_BUCKET_NAME, object_key_from_url(first), mocked_aws)
    assert object_exists_in_s3(TEST_BUCKET_NAME, object_key_from_url(second), mocked_aws)


def test_upload_marks_object_public(object_storage: ObjectStorage, mocked_aws):
    url = object_storage.upload(image_upload("mug.png"), "products", "p1")

    acl = mocked_aws.get_object_acl(Bucket=TEST_BUCKET_NAME, Key=object_key_from_url(url))
    public_permissions = [
        grant["Permission"] for grant in acl["Grants"] if grant["Grantee"].get("URI") == ALL_USERS_URI
    ]
    assert "READ" in public_permissions


def test_upload_without_file_returns_none(object_storage: ObjectStorage):
    assert object_storage.upload(None, "products", "p1") is None


def test_delete_removes_object(object_storage: ObjectStorage, mocked_aws):
    url = object_storage.upload(image_upload("mug.png"), "products", "p1")

    assert object_storage.delete(url, "products", "p1") is True
    assert not object_exists_in_s3(TEST_BUCKET_NAME, object_key_from_url(url), mocked_aws)


def test_delete_empty_url_returns_false(object_storage: ObjectStorage):
    assert object_storage.delete("", "products", "p1") is False
    assert object_storage.delete(None, "products", "p1") is False


def test_delete_missing_object_returns_false(object_storage: ObjectStorage):
    url = object_storage.public_url("products/p1/1700000000gone.png")

    assert object_storage.delete(url, "products", "p1") is False


def test_delete_uses_reference_folder_not_url_folder(object_storage: ObjectStorage, mocked_aws):
    """Only the file name is taken from the URL; folder and reference come from the caller."""
    url = object_storage.upload(image_upload("mug.png"), "products", "p1")

    assert object_storage.delete(url, "products", "p2") is False
    assert object_exists_in_s3(TEST_BUCKET_NAME, object_key_from_url(url), mocked_aws)


def test_file_names_with_spaces_round_trip(object_storage: ObjectStorage, mocked_aws):
    url = object_storage.upload(image_upload("my mug.png"), "products", "p1")

    assert "%20" in url
    assert ObjectStorage.file_name_from_url(url).endswith("my mug.png")
    assert object_storage.delete(url, "products", "p1") is True


@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://bucket.s3.amazonaws.com/products/p1/1700000000mug.png", "1700000000mug.png"),
        ("https://cdn.example.com/products/p1/1700000000my%20mug.png?v=2", "1700000000my mug.png"),
        ("http://localhost:5000/bucket/products/p1/1700000000a%2Bb.gif", "1700000000a+b.gif"),
    ],
)
def test_file_name_from_url(url, expected):
    assert ObjectStorage.file_name_from_url(url) == expected


def test_public_url_variants():
    s3_client = object()
    assert ObjectStorage("b", s3_client, region="eu-west-1").public_url("products/p1/x.png") == (
        "https://b.s3.eu-west-1.amazonaws.com/products/p1/x.png"
    )
    assert ObjectStorage("b", s3_client, endpoint_url="http://localhost:5000/").public_url("products/p1/x.png") == (
        "http://localhost:5000/b/products/p1/x.png"
    )
    assert ObjectStorage("b", s3_client, public_base_url="https://cdn.example.com").public_url("k/x y.png") == (
        "https://cdn.example.com/k/x%20y.png"
    )


def test_ensure_bucket_creates_missing_bucket(aws_credentials):
    with mock_aws():
        s3_client = boto3.client("s3", region_name="eu-west-1")
        storage = ObjectStorage("fresh-bucket", s3_client, region="eu-west-1")

        assert storage.ping() is False
        storage.ensure_bucket()
        storage.ensure_bucket()
        assert storage.ping() is True
