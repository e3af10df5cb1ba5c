import enum
import logging
from typing import Optional, TYPE_CHECKING
from uuid import UUID

from pdf_library_client.exceptions import (
    FetchError,
    NotFoundError,
    PdfClientError,
    RenderError,
)
from pdf_library_client.models import PageView, PdfFile
from pdf_library_client.protocols import DocumentRenderer

if TYPE_CHECKING:
    from pdf_library_client.client import PdfClient

logger = logging.getLogger(__name__)

MIN_ZOOM = 0.5
MAX_ZOOM = 2.5
ZOOM_STEP = 0.1


class ViewerStatus(str, enum.Enum):
    loading = "loading"
    ready = "ready"
    not_found = "not_found"
    load_error = "load_error"


class PdfViewer:
    """
    Состояние просмотра одного документа.

    loading -> ready | not_found | load_error. Навигация по страницам
    доступна только в ready и только после того, как рендерер сообщил
    число страниц. Запросы за границами диапазона игнорируются.
    """

    def __init__(self, client: "PdfClient", renderer: DocumentRenderer,
                 url_expiry: int = 3600):
        self._client = client
        self._renderer = renderer
        self._url_expiry = url_expiry

        self.status = ViewerStatus.loading
        self.record: Optional[PdfFile] = None
        self.url: Optional[str] = None
        self.error: Optional[PdfClientError] = None
        self.total_pages: Optional[int] = None
        self.current_page = 1
        self.zoom = 1.0

    async def open(self, file_id: UUID) -> ViewerStatus:
        self.status = ViewerStatus.loading
        self.record = self.url = self.error = self.total_pages = None
        self.current_page = 1

        try:
            self.record = await self._client.get_pdf_file(file_id)
        except NotFoundError as e:
            return self._fail(ViewerStatus.not_found, e)
        except FetchError as e:
            return self._fail(ViewerStatus.load_error, e)

        try:
            self.url = await self._client.get_pdf_url(self.record.storage_path, self._url_expiry)
        except RenderError as e:
            return self._fail(ViewerStatus.load_error, e)

        self.status = ViewerStatus.ready
        logger.info(f"Viewer ready for {file_id}, loading document")

        try:
            self.total_pages = await self._renderer.load(self.url)
        except RenderError as e:
            return self._fail(ViewerStatus.load_error, e)

        self.current_page = 1
        return self.status

    def _fail(self, status: ViewerStatus, error: PdfClientError) -> ViewerStatus:
        logger.warning(f"Viewer -> {status.value}: {error}")
        self.status = status
        self.error = error
        return status

    # ――― pages ――― #

    @property
    def can_navigate(self) -> bool:
        return self.status is ViewerStatus.ready and self.total_pages is not None

    def go_to_page(self, page: int) -> bool:
        if not self.can_navigate or not 1 <= page <= self.total_pages:
            return False
        self.current_page = page
        return True

    def next_page(self) -> bool:
        return self.go_to_page(self.current_page + 1)

    def previous_page(self) -> bool:
        return self.go_to_page(self.current_page - 1)

    # ――― zoom ――― #

    def set_zoom(self, zoom: float) -> bool:
        if self.status is not ViewerStatus.ready or not MIN_ZOOM <= zoom <= MAX_ZOOM:
            return False
        self.zoom = round(zoom, 1)
        return True

    # шаг округляется до проверки границ: 0.6 - 0.1 даёт 0.4999...
    def zoom_in(self) -> bool:
        return self.set_zoom(round(self.zoom + ZOOM_STEP, 1))

    def zoom_out(self) -> bool:
        return self.set_zoom(round(self.zoom - ZOOM_STEP, 1))

    async def render_page(self) -> PageView:
        if not self.can_navigate:
            raise RenderError(f"Document is not ready (status: {self.status.value})")
        return await self._renderer.render_page(self.current_page, self.zoom)
