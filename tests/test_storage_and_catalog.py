import pytest

from apps.catalog.service import get_catalog, load_catalog
from apps.storage.service import LocalFileStore, S3FileStore, build_object_key
from common.errors import DependencyError


def test_object_keys_are_unique_and_safe():
    first = build_object_key("vendor-registrations/abc/", "../../etc/passwd")
    second = build_object_key("vendor-registrations/abc", "../../etc/passwd")
    assert first != second
    assert first.startswith("vendor-registrations/abc/")
    assert first.endswith("-passwd")
    assert ".." not in first


async def test_local_store_round_trip(tmp_path):
    store = LocalFileStore(root=str(tmp_path))
    stored = await store.store(b"hello", "cheque.png", "image/png", "vendor-registrations/1")
    assert stored.url.startswith("local://vendor-registrations/1/")
    assert stored.size == 5
    assert await store.fetch(stored.url) == b"hello"

    await store.delete(stored.url)
    with pytest.raises(DependencyError):
        await store.fetch(stored.url)


async def test_local_store_refuses_foreign_urls(tmp_path):
    store = LocalFileStore(root=str(tmp_path))
    with pytest.raises(DependencyError):
        await store.fetch("https://bucket.s3.amazonaws.com/key")


class FakeS3Client:
    class meta:
        region_name = "ap-south-1"

    def __init__(self):
        self.objects = {}

    def put_object(self, Bucket, Key, Body, ContentType):
        self.objects[Key] = Body

    def get_object(self, Bucket, Key):
        import io

        return {"Body": io.BytesIO(self.objects[Key])}

    def delete_object(self, Bucket, Key):
        self.objects.pop(Key, None)


async def test_s3_store_uses_virtual_hosted_urls():
    client = FakeS3Client()
    store = S3FileStore(bucket="vendor-docs", client=client)
    stored = await store.store(b"%PDF", "pan.pdf", "application/pdf", "vendor-registrations/42")
    assert stored.url.startswith("https://vendor-docs.s3.ap-south-1.amazonaws.com/vendor-registrations/42/")
    assert await store.fetch(stored.url) == b"%PDF"
    await store.delete(stored.url)
    assert client.objects == {}


def test_catalog_vocabularies():
    catalog = get_catalog()
    assert "catering" in catalog.categories
    assert "pan_card" in catalog.document_types
    assert "Karnataka" in catalog.states
    assert len(catalog.document_types) == 19


def test_catalog_is_loaded_from_configured_file(tmp_path):
    path = tmp_path / "catalog.json"
    path.write_text(
        '{"entity_types": ["llp"], "categories": ["florist"], "document_types": ["pan_card"], "states": ["Goa"]}'
    )
    catalog = load_catalog(str(path))
    assert catalog.categories == ("florist",)
    assert catalog.pricing_tiers == ()
