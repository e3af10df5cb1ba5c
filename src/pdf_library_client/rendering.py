import logging
from io import BytesIO
from typing import Optional

import urllib3
from pypdf import PdfReader
from pypdf.errors import PyPdfError

from pdf_library_client.exceptions import RenderError
from pdf_library_client.models import PageView
from pdf_library_client.utils.minio_async import run_io_bound

logger = logging.getLogger(__name__)


class PdfRenderer:
    """
    Загружает PDF по подписанной ссылке и отдаёт страницы с учётом масштаба.
    Один экземпляр держит один документ; повторный load() заменяет его.
    """

    def __init__(self, http: urllib3.PoolManager | None = None):
        self._http = http or urllib3.PoolManager()
        self._reader: Optional[PdfReader] = None

    @property
    def total_pages(self) -> Optional[int]:
        return len(self._reader.pages) if self._reader else None

    async def load(self, url: str) -> int:
        data = await self._fetch(url)
        return await self.load_bytes(data)

    async def load_bytes(self, data: bytes) -> int:
        try:
            reader = await run_io_bound(PdfReader, BytesIO(data))
            total = len(reader.pages)
        except (PyPdfError, ValueError) as e:
            raise RenderError(f"Failed to parse PDF document: {e}") from e
        if total == 0:
            raise RenderError("PDF document has no pages")

        self._reader = reader
        logger.debug(f"PDF parsed: {total} pages")
        return total

    async def render_page(self, page_number: int, scale: float) -> PageView:
        if self._reader is None:
            raise RenderError("No document loaded")
        total = len(self._reader.pages)
        if not 1 <= page_number <= total:
            raise RenderError(f"Page {page_number} is out of range 1..{total}")

        page = self._reader.pages[page_number - 1]
        try:
            text = await run_io_bound(page.extract_text) or ""
        except (PyPdfError, ValueError) as e:
            raise RenderError(f"Failed to render page {page_number}: {e}") from e

        return PageView(
            page_number=page_number,
            total_pages=total,
            scale=scale,
            width=float(page.mediabox.width) * scale,
            height=float(page.mediabox.height) * scale,
            text=text,
        )

    async def _fetch(self, url: str) -> bytes:
        try:
            resp = await run_io_bound(self._http.request, "GET", url)
        except urllib3.exceptions.HTTPError as e:
            raise RenderError(f"Failed to download PDF: {e}") from e
        if resp.status >= 400:
            raise RenderError(f"Failed to download PDF: HTTP {resp.status}")
        return resp.data
