import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import select, delete, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker, AsyncSession

from pdf_library_client.exceptions import DatabaseError
from pdf_library_client.models.pdf_file import PdfFile, PdfFileCreate
from pdf_library_client.db.pdf_file_orm import PdfFileORM
from pdf_library_client.db.base import get_session

logger = logging.getLogger(__name__)

# asyncpg отдаёт сетевые ошибки как OSError, не оборачивая их
_DB_ERRORS = (SQLAlchemyError, OSError)


class PdfFileRepository:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def check_connection(self):
        """Проверяет соединение с базой данных, выполняя простой запрос."""
        logger.debug("Checking PostgreSQL connection...")
        async with get_session(self._session_factory) as session:
            try:
                await session.execute(text("SELECT 1"))
                logger.debug("PostgreSQL connection successful.")
            except _DB_ERRORS as e:
                logger.error(f"PostgreSQL connection failed: {e}")
                raise DatabaseError("Failed to connect to the database.") from e

    async def insert(self, data: PdfFileCreate) -> PdfFile:
        async with get_session(self._session_factory) as session:
            try:
                orm = PdfFileORM(**data.model_dump())
                session.add(orm)
                await session.commit()
                # created_at и id выставляет сервер, перечитываем строку
                await session.refresh(orm)
                return orm.to_pydantic()
            except _DB_ERRORS as e:
                await session.rollback()
                raise DatabaseError(f"Failed to save pdf metadata: {e}") from e

    async def get(self, file_id: UUID) -> Optional[PdfFile]:
        async with get_session(self._session_factory) as session:
            try:
                res = await session.execute(select(PdfFileORM).where(PdfFileORM.id == file_id))
                orm = res.scalar_one_or_none()
                return orm.to_pydantic() if orm else None
            except _DB_ERRORS as e:
                raise DatabaseError(f"Failed to fetch pdf {file_id}: {e}") from e

    async def list_all(self) -> list[PdfFile]:
        """Возвращает все файлы, свежие первыми."""
        async with get_session(self._session_factory) as session:
            try:
                q = select(PdfFileORM).order_by(PdfFileORM.created_at.desc())
                rows = await session.execute(q)
                return [o.to_pydantic() for o in rows.scalars().all()]
            except _DB_ERRORS as e:
                raise DatabaseError(f"Failed to list pdf files: {e}") from e

    async def delete(self, file_id: UUID) -> bool:
        async with get_session(self._session_factory) as session:
            try:
                res = await session.execute(delete(PdfFileORM).where(PdfFileORM.id == file_id))
                await session.commit()
                return res.rowcount > 0
            except _DB_ERRORS as e:
                await session.rollback()
                raise DatabaseError(f"Failed to delete pdf {file_id}: {e}") from e
