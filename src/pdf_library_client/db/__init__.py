# pdf_library_client/db/__init__.py

from .base import Base, get_session
from .pdf_file_orm import PdfFileORM

__all__ = ["Base", "get_session", "PdfFileORM"]
