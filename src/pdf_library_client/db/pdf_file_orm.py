from uuid import UUID, uuid4

from sqlalchemy import BigInteger, Index, String
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from pdf_library_client.db.base import Base, CreatedAt
from pdf_library_client.models.pdf_file import PdfFile, PDF_CONTENT_TYPE


class PdfFileORM(Base):
    __tablename__ = "pdf_files"

    id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String, nullable=False)
    size: Mapped[int] = mapped_column(BigInteger, nullable=False)
    # "{epoch-millis}-{name}": ключ объекта в бакете
    storage_path: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    content_type: Mapped[str] = mapped_column(String, nullable=False, server_default=PDF_CONTENT_TYPE)
    created_at: Mapped[CreatedAt]

    __table_args__ = (
        Index("idx_pdf_files_created_at", "created_at"),
    )

    def to_pydantic(self) -> PdfFile:
        return PdfFile.model_validate(self)
