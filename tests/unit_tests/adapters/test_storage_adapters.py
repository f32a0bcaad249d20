import boto3
import pytest

from vault_api.adapters.storage import (
    InMemoryObjectStore,
    ObjectStore,
    S3ObjectStore,
    StorageFactory,
    decode_s3_metadata,
    encode_s3_metadata,
    stream_and_close,
)
from vault_api.config.settings import Settings
from tests.consts import TEST_BUCKET_NAME, TEST_REGION

TEST_METADATA = {
    "originalName": "résumé final.pdf",
    "contentType": "application/pdf",
    "uploadedAt": "2026-01-22T10:30:45.123Z",
    "checksum": "a" * 64,
}


@pytest.fixture(params=["memory_store", "s3_store"])
def store(request) -> ObjectStore:
    """Run each contract test against every backend."""
    return request.getfixturevalue(request.param)


def test_store_implements_protocol(store):
    assert isinstance(store, ObjectStore)


def test_put_then_head(store):
    store.put("docs/report.pdf", b"%PDF-1.4", content_type="application/pdf", metadata=TEST_METADATA)

    head = store.head("docs/report.pdf")

    assert head is not None
    assert head.key == "docs/report.pdf"
    assert head.size == len(b"%PDF-1.4")
    assert head.content_type == "application/pdf"
    assert head.etag
    assert head.uploaded.tzinfo is not None
    assert head.metadata == TEST_METADATA


def test_get_streams_body(store):
    store.put("hello.txt", b"Hello, world!", content_type="text/plain")

    stored = store.get("hello.txt")

    assert stored is not None
    assert b"".join(stored.body) == b"Hello, world!"
    assert stored.content_type == "text/plain"


def test_missing_keys_return_none(store):
    assert store.head("missing.txt") is None
    assert store.get("missing.txt") is None


def test_list_returns_every_key(store):
    for name in ["b.txt", "a.txt", "c.txt"]:
        store.put(name, name.encode())

    assert sorted(store.list()) == ["a.txt", "b.txt", "c.txt"]


def test_put_replaces_existing_object(store):
    store.put("a.txt", b"first")
    store.put("a.txt", b"second")

    assert b"".join(store.get("a.txt").body) == b"second"
    assert store.list() == ["a.txt"]


def test_delete_removes_object(store):
    store.put("a.txt", b"hi")

    store.delete("a.txt")

    assert store.head("a.txt") is None
    assert store.list() == []


def test_delete_of_missing_key_is_ignored(store):
    store.delete("never-stored.txt")


def test_store_is_ready(store):
    assert store.is_ready()


def test_s3_store_without_bucket_is_not_ready(mocked_aws):
    store = S3ObjectStore("bucket-that-does-not-exist", s3_client=boto3.client("s3", region_name=TEST_REGION))

    assert not store.is_ready()


def test_s3_metadata_is_ascii_on_the_wire(s3_store):
    s3_store.put("cv.pdf", b"cv", metadata=TEST_METADATA)

    raw = boto3.client("s3", region_name=TEST_REGION).head_object(Bucket=TEST_BUCKET_NAME, Key="cv.pdf")

    raw_name = {k.lower(): v for k, v in raw["Metadata"].items()}["originalname"]
    assert raw_name.isascii()
    assert raw_name == "r%C3%A9sum%C3%A9%20final.pdf"


def test_encode_s3_metadata_only_touches_free_form_values():
    encoded = encode_s3_metadata({"originalName": "a b.txt", "contentType": "text/plain"})

    assert encoded == {"originalName": "a%20b.txt", "contentType": "text/plain"}


def test_decode_s3_metadata_restores_casing_and_name():
    decoded = decode_s3_metadata({
        "originalname": "r%C3%A9sum%C3%A9.pdf",
        "uploadedat": "2026-01-22T10:30:45.123Z",
        "checksum": "abc",
        "x-custom": "kept",
    })

    assert decoded == {
        "originalName": "résumé.pdf",
        "uploadedAt": "2026-01-22T10:30:45.123Z",
        "checksum": "abc",
        "x-custom": "kept",
    }


def test_decode_s3_metadata_handles_missing_metadata():
    assert decode_s3_metadata(None) == {}


def test_memory_store_len_counts_objects():
    store = InMemoryObjectStore()
    store.put("a.txt", b"a")
    store.put("b.txt", b"b")

    assert len(store) == 2


def test_factory_builds_memory_store_for_local_dev():
    store = StorageFactory.get_store(Settings(deployment_mode="local-dev"))

    assert isinstance(store, InMemoryObjectStore)


def test_factory_builds_s3_store_for_aws_prod(mocked_aws):
    store = StorageFactory.get_store(
        Settings(deployment_mode="aws-prod", s3_bucket_name=TEST_BUCKET_NAME)
    )

    assert isinstance(store, S3ObjectStore)
    assert store.bucket_name == TEST_BUCKET_NAME
    assert store.is_ready()


def test_factory_rejects_unknown_mode():
    settings = Settings(deployment_mode="local-dev")
    settings.deployment_mode = "on-prem"

    with pytest.raises(ValueError, match="Invalid deployment_mode"):
        StorageFactory.get_store(settings)


def test_put_returns_head_of_written_object(store):
    written = store.put("a.txt", b"hello", content_type="text/plain", metadata={"checksum": "abc"})

    assert written.key == "a.txt"
    assert written.size == 5
    assert written.content_type == "text/plain"
    assert written.metadata == {"checksum": "abc"}
    assert written.etag == store.head("a.txt").etag


def test_s3_put_needs_no_follow_up_head(s3_store, monkeypatch):
    def head_object(**kwargs):
        raise AssertionError("put should not read the object back")

    monkeypatch.setattr(s3_store.s3_client, "head_object", head_object)

    written = s3_store.put("a.txt", b"hello")

    assert written.size == 5
    assert written.content_type == "application/octet-stream"


class FakeStreamingBody:
    def __init__(self, chunks):
        self.chunks = chunks
        self.closed = False

    def iter_chunks(self, chunk_size):
        yield from self.chunks

    def close(self):
        self.closed = True


def test_stream_and_close_releases_body_when_fully_read():
    body = FakeStreamingBody([b"ab", b"cd"])

    assert b"".join(stream_and_close(body)) == b"abcd"
    assert body.closed


def test_stream_and_close_releases_body_when_abandoned():
    body = FakeStreamingBody([b"ab", b"cd"])
    stream = stream_and_close(body)

    assert next(stream) == b"ab"
    stream.close()

    assert body.closed
