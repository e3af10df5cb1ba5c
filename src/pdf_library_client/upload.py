import asyncio
import logging
import math
import time
from typing import Callable, Optional

from pdf_library_client.exceptions import (
    MetadataError,
    MinioError,
    DatabaseError,
    OrphanedObjectError,
    TransferError,
)
from pdf_library_client.models import PDF_CONTENT_TYPE, PdfFile, PdfFileCreate
from pdf_library_client.protocols import MetadataTable, ObjectStore

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]

DEFAULT_CHUNK_SIZE = 1024 * 1024


def build_storage_path(file_name: str, now: float) -> str:
    """Ключ объекта: миллисекунды эпохи + исходное имя."""
    return f"{int(now * 1000)}-{file_name}"


class PendingUpload:
    """
    Объект в хранилище, для которого ещё нет строки метаданных.

    При любом выходе без commit() (ошибка, отмена задачи) пытается удалить
    объект. Если удаление не удалось после ошибки метаданных, наружу уходит
    OrphanedObjectError с обеими ошибками.
    """

    def __init__(self, store: ObjectStore, storage_path: str):
        self._store = store
        self.storage_path = storage_path
        self.committed = False

    def commit(self):
        self.committed = True

    async def __aenter__(self) -> "PendingUpload":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        if self.committed or exc_type is None:
            return False

        logger.warning(f"Upload of '{self.storage_path}' did not complete ({exc_type.__name__}). Removing object.")
        try:
            # shield: при отмене задачи удаление всё равно доводится до конца
            await asyncio.shield(self._store.remove_objects([self.storage_path]))
        except MinioError as cleanup_error:
            logger.error(f"Compensating deletion of '{self.storage_path}' failed: {cleanup_error}. Object is orphaned.")
            if isinstance(exc, MetadataError):
                raise OrphanedObjectError(
                    f"Metadata insert failed and object '{self.storage_path}' could not be removed",
                    storage_path=self.storage_path,
                    error=exc,
                    cleanup_error=cleanup_error,
                ) from cleanup_error
            return False

        logger.info(f"Object '{self.storage_path}' removed after failed upload.")
        return False


class UploadPipeline:
    """
    Загрузка одного PDF: последовательная передача чанков по одному ключу,
    затем одна строка метаданных. Строка появляется только после того,
    как объект передан целиком.
    """

    def __init__(
        self,
        object_repo: ObjectStore,
        meta_repo: MetadataTable,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        clock: Callable[[], float] = time.time,
    ):
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self._store = object_repo
        self._meta = meta_repo
        self._chunk_size = chunk_size
        self._clock = clock

    async def run(
        self,
        file_name: str,
        content: Optional[bytes],
        content_type: str = PDF_CONTENT_TYPE,
        on_progress: Optional[ProgressCallback] = None,
    ) -> Optional[PdfFile]:
        if content is None:
            logger.warning("Upload called without payload; nothing to do.")
            return None

        storage_path = build_storage_path(file_name, self._clock())
        size = len(content)
        logger.info(f"Uploading '{file_name}' ({size} bytes) to '{storage_path}'")

        async with PendingUpload(self._store, storage_path) as pending:
            await self._transfer(storage_path, content, content_type, on_progress)

            try:
                record = await self._meta.insert(PdfFileCreate(
                    name=file_name,
                    size=size,
                    storage_path=storage_path,
                    content_type=content_type,
                ))
            except DatabaseError as e:
                logger.error(f"Metadata insert for '{storage_path}' failed: {e}")
                raise MetadataError(f"Failed to save metadata for '{file_name}'") from e

            pending.commit()

        logger.info(f"Upload of '{file_name}' complete, id={record.id}")
        return record

    async def _transfer(self, storage_path: str, content: bytes, content_type: str,
                        on_progress: Optional[ProgressCallback]):
        # пустой файл это один пустой чанк
        total = max(1, math.ceil(len(content) / self._chunk_size))

        for index in range(total):
            end = min((index + 1) * self._chunk_size, len(content))
            try:
                # пишем весь накопленный префикс поверх того же ключа
                await self._store.put_object(
                    storage_path, content[:end], content_type=content_type, upsert=True
                )
            except MinioError as e:
                logger.error(f"Chunk {index + 1}/{total} of '{storage_path}' failed: {e}")
                raise TransferError(
                    f"Upload failed at chunk {index + 1} of {total}",
                    storage_path=storage_path,
                    chunk_index=index,
                ) from e

            logger.debug(f"Chunk {index + 1}/{total} of '{storage_path}' stored ({end} bytes)")
            self._notify(on_progress, (index + 1) / total * 100)

    @staticmethod
    def _notify(on_progress: Optional[ProgressCallback], percent: float):
        if on_progress is None:
            return
        try:
            on_progress(percent)
        except Exception as e:
            logger.warning(f"Progress callback raised {e!r}; ignored.")
