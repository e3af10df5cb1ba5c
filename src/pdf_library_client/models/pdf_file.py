from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

PDF_CONTENT_TYPE = "application/pdf"


class PdfFileCreate(BaseModel):
    name: str = Field(min_length=1)
    size: int = Field(ge=0)
    storage_path: str = Field(min_length=1)
    content_type: str = PDF_CONTENT_TYPE


class PdfFile(PdfFileCreate):
    """Строка таблицы pdf_files: один загруженный PDF."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    created_at: datetime
