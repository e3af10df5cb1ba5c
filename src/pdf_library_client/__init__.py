# Файл: src/pdf_library_client/__init__.py

from typing import Optional
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker
from .client import PdfClient
from .config import get_settings, PdfClientConfig, PostgresConfig, MinioConfig, UploadConfig
from .repositories import PdfFileRepository, MinioRepository
from .rendering import PdfRenderer
from .viewer import PdfViewer, ViewerStatus
from .models import PdfFile, PdfFileCreate, PageView, PDF_CONTENT_TYPE

from .exceptions import *

def create_pdf_client(config: Optional[PdfClientConfig] = None) -> PdfClient:
    """
    Фабричная функция для создания и конфигурации PdfClient.

    :param config: Единый объект с настройками.
                   Если не предоставлен, используются переменные окружения.
    :return: Сконфигурированный экземпляр PdfClient.
    """
    if config is None:
        config = get_settings().to_client_config()

    engine = create_async_engine(
            config.postgres.get_pg_dsn(),
            pool_size=config.postgres.pool_size,
            max_overflow=config.postgres.max_overflow,
            pool_timeout=config.postgres.pool_timeout,
            pool_recycle=config.postgres.pool_recycle,
            pool_pre_ping=config.postgres.pool_pre_ping,
            connect_args={
                "server_settings": {
                    "application_name": config.postgres.application_name
                }
            }
        )

    session_factory = async_sessionmaker(bind=engine, expire_on_commit=False)

    return PdfClient(
        meta_repo=PdfFileRepository(session_factory),
        object_repo=MinioRepository(config.minio),
        renderer_factory=PdfRenderer,
        upload_config=config.upload,
        engine=engine,
    )

__all__ = [
    "PdfClient", "create_pdf_client", "PdfViewer", "ViewerStatus", "PdfRenderer",
    "PdfClientConfig", "PostgresConfig", "MinioConfig", "UploadConfig",
    "PdfFile", "PdfFileCreate", "PageView", "PDF_CONTENT_TYPE",
    "PdfClientError", "DatabaseError", "MinioError", "ValidationError", "TransferError",
    "MetadataError", "OrphanedObjectError", "FetchError", "NotFoundError", "RenderError",
]
