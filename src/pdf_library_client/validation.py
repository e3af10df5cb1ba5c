from pdf_library_client.exceptions import ValidationError
from pdf_library_client.models import PDF_CONTENT_TYPE


def validate_upload(file_name: str, content_type: str | None, size: int, max_file_size: int) -> None:
    """
    Проверки, которые выполняются до любого сетевого вызова.
    Лимит размера включительный: файл ровно max_file_size принимается.
    """
    if not file_name:
        raise ValidationError("File name must not be empty")
    if content_type != PDF_CONTENT_TYPE:
        raise ValidationError("Only PDF files are allowed")
    if size > max_file_size:
        limit_mb = max_file_size / (1024 * 1024)
        raise ValidationError(f"File size must be less than {limit_mb:g}MB")
