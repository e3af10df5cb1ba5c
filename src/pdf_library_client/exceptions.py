class PdfClientError(Exception):
    """Base class."""


# --- инфраструктура: переводятся клиентом в ошибки ниже ---

class DatabaseError(PdfClientError):
    pass


class MinioError(PdfClientError):
    pass


# --- ошибки уровня операций ---

class ValidationError(PdfClientError):
    """Файл отклонён до любого сетевого вызова (тип, размер, имя)."""


class TransferError(PdfClientError):
    """Запись одного из чанков в хранилище не удалась."""

    def __init__(self, message: str, storage_path: str, chunk_index: int):
        super().__init__(message)
        self.storage_path = storage_path
        self.chunk_index = chunk_index


class MetadataError(PdfClientError):
    """Запись (или удаление) строки метаданных не удалась."""


class OrphanedObjectError(PdfClientError):
    """
    Объект остался в хранилище без строки метаданных: удаление объекта
    после основной ошибки тоже провалилось.
    """

    def __init__(self, message: str, storage_path: str,
                 error: PdfClientError | None = None,
                 cleanup_error: Exception | None = None):
        super().__init__(message)
        self.storage_path = storage_path
        self.error = error
        self.cleanup_error = cleanup_error


class FetchError(PdfClientError):
    pass


class NotFoundError(PdfClientError):
    pass


class RenderError(PdfClientError):
    pass
