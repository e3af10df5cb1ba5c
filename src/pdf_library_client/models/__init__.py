from .pdf_file import PDF_CONTENT_TYPE, PdfFileCreate, PdfFile
from .page import PageView

__all__ = ["PDF_CONTENT_TYPE", "PdfFileCreate", "PdfFile", "PageView"]
