from rich.console import Console

def get_rich_console() -> Console: return Console(stderr=True)

def format_file_size(size: int) -> str:
    """Человекочитаемый размер: '512 bytes', '1.5 KB', '2.5 MB'."""
    if size < 1024:
        return f"{size} bytes"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"
