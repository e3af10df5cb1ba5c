import logging
import time
from typing import Callable, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncEngine

from pdf_library_client.config import UploadConfig
from pdf_library_client.exceptions import (
    DatabaseError,
    FetchError,
    MetadataError,
    MinioError,
    NotFoundError,
    OrphanedObjectError,
    RenderError,
)
from pdf_library_client.models import PDF_CONTENT_TYPE, PdfFile
from pdf_library_client.protocols import DocumentRenderer, MetadataTable, ObjectStore
from pdf_library_client.upload import ProgressCallback, UploadPipeline
from pdf_library_client.validation import validate_upload
from pdf_library_client.viewer import PdfViewer

logger = logging.getLogger(__name__)


class PdfClient:
    """
    Единая точка доступа: загрузка, список, просмотр и удаление PDF.
    Все внешние сервисы передаются через конструктор.
    """

    def __init__(
        self,
        meta_repo: MetadataTable,
        object_repo: ObjectStore,
        renderer_factory: Optional[Callable[[], DocumentRenderer]] = None,
        upload_config: UploadConfig | None = None,
        engine: AsyncEngine | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.metarepo = meta_repo
        self.storage = object_repo
        self.renderer_factory = renderer_factory
        self.upload_config = upload_config or UploadConfig()
        self._engine = engine
        self._pipeline = UploadPipeline(
            object_repo, meta_repo,
            chunk_size=self.upload_config.chunk_size,
            clock=clock,
        )

    async def aclose(self):
        if self._engine is not None:
            await self._engine.dispose()

    async def check_connections(self) -> dict[str, str]:
        """
        Проверяет доступность PostgreSQL и MinIO.
        Возвращает словарь со статусами.
        """
        statuses = {}

        try:
            await self.metarepo.check_connection()
            statuses["postgres"] = "ok"
        except DatabaseError as e:
            statuses["postgres"] = f"failed: {e}"

        try:
            await self.storage.check_connection()
            statuses["minio"] = "ok"
        except MinioError as e:
            statuses["minio"] = f"failed: {e}"

        return statuses

    # ――― upload ――― #

    async def upload_pdf(
        self,
        file_name: str,
        content: Optional[bytes],
        content_type: str | None = PDF_CONTENT_TYPE,
        on_progress: Optional[ProgressCallback] = None,
    ) -> Optional[PdfFile]:
        """
        Проверяет файл и загружает его. Невалидный файл отклоняется
        ValidationError без единого сетевого вызова; None вместо содержимого
        возвращает None.
        """
        if content is None:
            return None
        validate_upload(file_name, content_type, len(content), self.upload_config.max_file_size)
        return await self._pipeline.run(file_name, content, content_type, on_progress)

    # ――― read ――― #

    async def get_pdf_files(self) -> list[PdfFile]:
        """Все файлы, свежие первыми. Пустая таблица даёт пустой список, не ошибка."""
        try:
            return await self.metarepo.list_all()
        except DatabaseError as e:
            logger.error(f"Error fetching PDF files: {e}")
            raise FetchError("Failed to load PDF files") from e

    async def get_pdf_file(self, file_id: UUID) -> PdfFile:
        try:
            record = await self.metarepo.get(file_id)
        except DatabaseError as e:
            logger.error(f"Error fetching PDF file {file_id}: {e}")
            raise FetchError(f"Failed to load PDF file {file_id}") from e
        if record is None:
            raise NotFoundError(f"PDF file {file_id} not found")
        return record

    async def get_pdf_url(self, storage_path: str, expires_in: int | None = None) -> str:
        """Подписанная ссылка на чтение объекта (по умолчанию на час)."""
        if expires_in is None:
            expires_in = self.upload_config.signed_url_expiry
        try:
            url = await self.storage.get_presigned_url(storage_path, expires_in_seconds=expires_in)
        except MinioError as e:
            logger.error(f"Error creating signed URL for '{storage_path}': {e}")
            raise RenderError("Could not retrieve PDF file") from e
        logger.info(f"Generated signed URL for '{storage_path}' ({expires_in}s)")
        return url

    async def download_pdf(self, file_id: UUID) -> bytes:
        record = await self.get_pdf_file(file_id)
        try:
            return await self.storage.get_object(record.storage_path)
        except MinioError as e:
            raise FetchError(f"Failed to download PDF file {file_id}") from e

    # ――― delete ――― #

    async def delete_pdf_file(self, file_id: UUID):
        """
        Сначала удаляется строка (файл исчезает для читателей), потом объект.
        Строка без объекта не остаётся никогда. Объект без строки остаётся
        только при сбое удаления объекта (OrphanedObjectError).
        """
        record = await self.get_pdf_file(file_id)

        try:
            deleted = await self.metarepo.delete(file_id)
        except DatabaseError as e:
            raise MetadataError(f"Failed to delete metadata of {file_id}") from e
        if not deleted:
            raise NotFoundError(f"PDF file {file_id} not found")

        try:
            await self.storage.remove_objects([record.storage_path])
        except MinioError as e:
            logger.error(f"Metadata of {file_id} deleted but object '{record.storage_path}' was not: {e}")
            raise OrphanedObjectError(
                f"Object '{record.storage_path}' could not be removed",
                storage_path=record.storage_path,
                cleanup_error=e,
            ) from e
        logger.info(f"PDF file {file_id} deleted ('{record.storage_path}')")

    # ――― viewer ――― #

    async def open_viewer(self, file_id: UUID) -> PdfViewer:
        if self.renderer_factory is None:
            raise NotImplementedError("Renderer is not configured.")
        viewer = PdfViewer(self, self.renderer_factory(), url_expiry=self.upload_config.signed_url_expiry)
        await viewer.open(file_id)
        return viewer
