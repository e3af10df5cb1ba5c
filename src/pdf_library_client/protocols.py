"""
Интерфейсы внешних сервисов, которые клиент получает через конструктор.
MinioRepository, PdfFileRepository и PdfRenderer им соответствуют;
в тестах подставляются in-memory реализации.
"""
from typing import Optional, Protocol
from uuid import UUID

from pdf_library_client.models import PdfFile, PdfFileCreate, PageView


class ObjectStore(Protocol):
    async def check_connection(self) -> None: ...

    async def put_object(self, object_name: str, data: bytes,
                         content_type: str | None = None,
                         upsert: bool = False) -> None: ...

    async def get_object(self, object_name: str) -> bytes: ...

    async def remove_objects(self, object_names: list[str]) -> None: ...

    async def get_presigned_url(self, object_name: str, expires_in_seconds: int = 3600) -> str: ...


class MetadataTable(Protocol):
    async def check_connection(self) -> None: ...

    async def insert(self, data: PdfFileCreate) -> PdfFile: ...

    async def get(self, file_id: UUID) -> Optional[PdfFile]: ...

    async def list_all(self) -> list[PdfFile]: ...

    async def delete(self, file_id: UUID) -> bool: ...


class DocumentRenderer(Protocol):
    async def load(self, url: str) -> int: ...

    async def render_page(self, page_number: int, scale: float) -> PageView: ...
