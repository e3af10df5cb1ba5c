from .minio_repository import MinioRepository
from .pg_repositoryPdf import PdfFileRepository

__all__ = [
    "MinioRepository",
    "PdfFileRepository",
]
