from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID, uuid4

import pytest

from pdf_library_client import PdfClient
from pdf_library_client.config import UploadConfig
from pdf_library_client.exceptions import DatabaseError, MinioError, RenderError
from pdf_library_client.models import PageView, PdfFile, PdfFileCreate


class InMemoryObjectStore:
    """Бакет в словаре. fail_put_on: номер вызова put (с 1), который упадёт."""

    def __init__(self):
        self.objects: dict[str, bytes] = {}
        self.calls: list[tuple] = []
        self.fail_put_on: int | None = None
        self.fail_remove = False
        self.fail_sign = False
        self._puts = 0

    async def check_connection(self):
        self.calls.append(("check",))

    async def put_object(self, object_name, data, content_type=None, upsert=False):
        self.calls.append(("put", object_name, len(data), content_type, upsert))
        self._puts += 1
        if self.fail_put_on == self._puts:
            raise MinioError("connection reset")
        if not upsert and object_name in self.objects:
            raise MinioError("already exists")
        self.objects[object_name] = bytes(data)

    async def get_object(self, object_name):
        self.calls.append(("get", object_name))
        if object_name not in self.objects:
            raise MinioError("NoSuchKey")
        return self.objects[object_name]

    async def remove_objects(self, object_names):
        self.calls.append(("remove", list(object_names)))
        if self.fail_remove:
            raise MinioError("remove failed")
        for name in object_names:
            self.objects.pop(name, None)

    async def get_presigned_url(self, object_name, expires_in_seconds=3600):
        self.calls.append(("sign", object_name, expires_in_seconds))
        if self.fail_sign:
            raise MinioError("signature failed")
        return f"http://minio.test/pdfs/{object_name}?X-Amz-Expires={expires_in_seconds}"


class InMemoryMetadataTable:
    def __init__(self):
        self.rows: dict[UUID, PdfFile] = {}
        self.calls: list[tuple] = []
        self.fail_insert = False
        self.fail_read = False
        self.fail_delete = False
        self._now = datetime(2024, 1, 1, tzinfo=timezone.utc)

    async def check_connection(self):
        self.calls.append(("check",))

    async def insert(self, data: PdfFileCreate) -> PdfFile:
        self.calls.append(("insert", data))
        if self.fail_insert:
            raise DatabaseError("insert failed")
        if any(r.storage_path == data.storage_path for r in self.rows.values()):
            raise DatabaseError("duplicate storage_path")
        self._now += timedelta(seconds=1)
        record = PdfFile(id=uuid4(), created_at=self._now, **data.model_dump())
        self.rows[record.id] = record
        return record

    async def get(self, file_id) -> Optional[PdfFile]:
        self.calls.append(("get", file_id))
        if self.fail_read:
            raise DatabaseError("select failed")
        return self.rows.get(file_id)

    async def list_all(self) -> list[PdfFile]:
        self.calls.append(("list",))
        if self.fail_read:
            raise DatabaseError("select failed")
        return sorted(self.rows.values(), key=lambda r: r.created_at, reverse=True)

    async def delete(self, file_id) -> bool:
        self.calls.append(("delete", file_id))
        if self.fail_delete:
            raise DatabaseError("delete failed")
        return self.rows.pop(file_id, None) is not None


class FakeRenderer:
    def __init__(self, total_pages: int = 5, fail_load: bool = False):
        self.total_pages = total_pages
        self.fail_load = fail_load
        self.loaded_url: str | None = None

    async def load(self, url: str) -> int:
        self.loaded_url = url
        if self.fail_load:
            raise RenderError("Failed to parse PDF document")
        return self.total_pages

    async def render_page(self, page_number: int, scale: float) -> PageView:
        return PageView(
            page_number=page_number,
            total_pages=self.total_pages,
            scale=scale,
            width=612 * scale,
            height=792 * scale,
            text=f"page {page_number}",
        )


class TickingClock:
    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        self.now += 0.001
        return self.now


@pytest.fixture
def object_store() -> InMemoryObjectStore:
    return InMemoryObjectStore()


@pytest.fixture
def metadata_table() -> InMemoryMetadataTable:
    return InMemoryMetadataTable()


@pytest.fixture
def renderer() -> FakeRenderer:
    return FakeRenderer()


@pytest.fixture
def pdf_client(object_store, metadata_table, renderer) -> PdfClient:
    return PdfClient(
        meta_repo=metadata_table,
        object_repo=object_store,
        renderer_factory=lambda: renderer,
        upload_config=UploadConfig(),
        clock=TickingClock(),
    )
