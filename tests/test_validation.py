"""Tests for upload validation, config defaults and small helpers."""

import pytest

from pdf_library_client.config import PdfClientConfig, PostgresConfig, Settings
from pdf_library_client.exceptions import ValidationError
from pdf_library_client.utils.cli_utils import format_file_size
from pdf_library_client.validation import validate_upload

LIMIT = 10 * 1024 * 1024


class TestValidateUpload:
    def test_pdf_within_limit(self):
        validate_upload("report.pdf", "application/pdf", 2621440, LIMIT)

    def test_pdf_at_limit(self):
        validate_upload("report.pdf", "application/pdf", LIMIT, LIMIT)

    def test_over_limit(self):
        with pytest.raises(ValidationError, match="10MB"):
            validate_upload("report.pdf", "application/pdf", LIMIT + 1, LIMIT)

    def test_wrong_type(self):
        with pytest.raises(ValidationError, match="Only PDF"):
            validate_upload("report.docx", "application/msword", 10, LIMIT)

    def test_missing_type(self):
        with pytest.raises(ValidationError):
            validate_upload("report", None, 10, LIMIT)

    def test_empty_name(self):
        with pytest.raises(ValidationError):
            validate_upload("", "application/pdf", 10, LIMIT)


class TestFormatFileSize:
    def test_bytes(self):
        assert format_file_size(512) == "512 bytes"

    def test_kilobytes(self):
        assert format_file_size(1536) == "1.5 KB"

    def test_megabytes(self):
        assert format_file_size(2621440) == "2.5 MB"


class TestConfig:
    def test_defaults(self):
        config = PdfClientConfig()
        assert config.upload.chunk_size == 1024 * 1024
        assert config.upload.max_file_size == LIMIT
        assert config.upload.signed_url_expiry == 3600
        assert config.minio.bucket == "pdfs"

    def test_dsn(self):
        pg = PostgresConfig(user="u", password="p", host="db", port=5433, db="pdfs")
        assert pg.get_pg_dsn() == "postgresql+asyncpg://u:p@db:5433/pdfs"

    def test_settings_from_env(self, monkeypatch):
        monkeypatch.setenv("POSTGRES__HOST", "pg.internal")
        monkeypatch.setenv("MINIO__BUCKET", "archive")
        monkeypatch.setenv("UPLOAD__CHUNK_SIZE", "4096")

        settings = Settings(_env_file=None)
        config = settings.to_client_config()

        assert config.postgres.host == "pg.internal"
        assert config.minio.bucket == "archive"
        assert config.upload.chunk_size == 4096
