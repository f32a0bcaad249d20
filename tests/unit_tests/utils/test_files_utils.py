import hashlib
import logging
from datetime import datetime, timezone

import pytest

from vault_api.utils.decorators import log_execution_time
from vault_api.utils.files import (
    DEFAULT_CONTENT_TYPE,
    calculate_checksum,
    choose_storage_key,
    format_timestamp,
    generate_timestamped_key,
    parse_metadata,
    parse_timestamp,
)

FIXED_NOW = datetime(2026, 1, 22, 10, 30, 45, 123456, tzinfo=timezone.utc)
FIXED_STAMP = "2026-01-22T10-30-45-123Z"


def test_calculate_checksum_is_hex_sha256():
    assert calculate_checksum(b"") == "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
    assert calculate_checksum(b"hi") == hashlib.sha256(b"hi").hexdigest()


def test_calculate_checksum_differs_for_different_content():
    assert calculate_checksum(b"hi") != calculate_checksum(b"yo")


def test_format_timestamp_uses_milliseconds_and_z_suffix():
    assert format_timestamp(FIXED_NOW) == "2026-01-22T10:30:45.123Z"


def test_format_timestamp_treats_naive_datetimes_as_utc():
    assert format_timestamp(datetime(2026, 1, 22, 10, 30, 45)) == "2026-01-22T10:30:45.000Z"


@pytest.mark.parametrize(
    "filename, expected",
    [
        ("report.pdf", f"report_{FIXED_STAMP}.pdf"),
        ("README", f"README_{FIXED_STAMP}"),
        ("archive.tar.gz", f"archive.tar_{FIXED_STAMP}.gz"),
        (".bashrc", f"_{FIXED_STAMP}.bashrc"),
    ],
)
def test_generate_timestamped_key(filename, expected):
    assert generate_timestamped_key(filename, now=FIXED_NOW) == expected


def test_choose_storage_key_keeps_free_names():
    assert choose_storage_key("a.txt", name_taken=False, now=FIXED_NOW) == "a.txt"
    assert choose_storage_key("a.txt", name_taken=True, now=FIXED_NOW) == f"a_{FIXED_STAMP}.txt"


def test_parse_timestamp_round_trips_formatted_values():
    assert parse_timestamp("2026-01-22T10:30:45.123Z") == datetime(2026, 1, 22, 10, 30, 45, 123000, tzinfo=timezone.utc)


def test_parse_timestamp_sorts_garbage_first():
    assert parse_timestamp("not a date") == datetime.min.replace(tzinfo=timezone.utc)


def test_parse_metadata_falls_back_for_missing_fields():
    metadata = parse_metadata("photo.jpg", {}, FIXED_NOW)

    assert metadata == {
        "name": "photo.jpg",
        "content_type": DEFAULT_CONTENT_TYPE,
        "uploaded_at": "2026-01-22T10:30:45.123Z",
        "checksum": "",
    }


def test_parse_metadata_prefers_stored_values():
    stored = {
        "originalName": "photo.jpg",
        "contentType": "image/jpeg",
        "uploadedAt": "2025-12-31T23:59:59.999Z",
        "checksum": "abc123",
    }
    metadata = parse_metadata(f"photo_{FIXED_STAMP}.jpg", stored, FIXED_NOW)

    assert metadata["name"] == "photo.jpg"
    assert metadata["content_type"] == "image/jpeg"
    assert metadata["uploaded_at"] == "2025-12-31T23:59:59.999Z"
    assert metadata["checksum"] == "abc123"


def test_log_execution_time_logs_success_and_failure(caplog):
    @log_execution_time
    def double(value):
        return value * 2

    @log_execution_time(logger_name="vault_api.tests")
    def explode():
        raise ValueError("boom")

    with caplog.at_level(logging.INFO):
        assert double(2) == 4
        with pytest.raises(ValueError):
            explode()

    assert "double completed in" in caplog.text
    assert "explode failed after" in caplog.text
    assert "boom" in caplog.text
