import asyncio
import mimetypes
import typer
import logging
import sys
from pathlib import Path
from typing import Optional
from uuid import UUID
if sys.platform == "win32":
    # asyncpg не работает с ProactorEventLoop по умолчанию в Windows
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn
from rich.table import Table

from pdf_library_client import create_pdf_client
from pdf_library_client import logging as pdf_logging
from pdf_library_client.config import get_settings
from pdf_library_client.db.base import Base
from pdf_library_client.exceptions import (
    FetchError,
    MetadataError,
    NotFoundError,
    OrphanedObjectError,
    PdfClientError,
    RenderError,
    TransferError,
    ValidationError,
)
from pdf_library_client.utils.cli_utils import format_file_size, get_rich_console
from pdf_library_client.viewer import ViewerStatus

from sqlalchemy.ext.asyncio import create_async_engine


app = typer.Typer(help="CLI for the PDF library: upload, list, view.")
logger = logging.getLogger(__name__)
console = get_rich_console()


@app.callback()
def main(log_level: Optional[str] = typer.Option(None, "--log-level", help="Overrides LOG_LEVEL.")):
    pdf_logging.configure(log_level)


def _fail(message: str) -> typer.Exit:
    console.print(f"[bold red]✖[/bold red] {message}", soft_wrap=True)
    return typer.Exit(code=1)


@app.command()
def init():
    """
    Creates the pdf_files table and ensures the MinIO bucket exists.
    """
    console.rule("[bold cyan]Service Initialization[/bold cyan]")

    with console.status("Creating PostgreSQL tables...", spinner="dots"):
        async def _create_tables():
            settings = get_settings()
            engine = create_async_engine(settings.postgres.get_pg_dsn())
            try:
                async with engine.begin() as conn:
                    await conn.run_sync(Base.metadata.create_all)
            finally:
                await engine.dispose()

        try:
            asyncio.run(_create_tables())
        except Exception as e:
            raise _fail(f"Database initialization FAILED: {e}")
        console.print("[bold green]✔[/bold green] Database tables created successfully.")

    with console.status("Initializing MinIO storage bucket...", spinner="dots"):
        async def _init_storage():
            client = create_pdf_client()
            try:
                await client.storage.check_connection()
            finally:
                await client.aclose()

        try:
            asyncio.run(_init_storage())
        except PdfClientError as e:
            raise _fail(f"MinIO storage initialization FAILED: {e}")
        console.print("[bold green]✔[/bold green] MinIO bucket is ready.")

    console.print("\n[bold green]All services initialized successfully![/bold green]")


@app.command()
def check():
    """Checks connectivity to PostgreSQL and MinIO."""
    console.rule("[bold cyan]Connection Check[/bold cyan]")

    async def _check():
        client = create_pdf_client()
        try:
            return await client.check_connections()
        finally:
            await client.aclose()

    statuses = asyncio.run(_check())
    for service, label in (("postgres", "PostgreSQL"), ("minio", "MinIO")):
        status = statuses.get(service, "unknown error")
        if status == "ok":
            console.print(f"[bold green]✔[/bold green] {label} connection: OK")
        else:
            console.print(f"[bold red]✖[/bold red] {label} connection: FAILED ({status})")
    if any(s != "ok" for s in statuses.values()):
        raise typer.Exit(code=1)


@app.command()
def upload(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True),
    content_type: Optional[str] = typer.Option(None, "--content-type", help="Defaults to a guess from the file name."),
):
    """Uploads one PDF file (at most 10MB)."""
    content_type = content_type or mimetypes.guess_type(path.name)[0]
    content = path.read_bytes()

    async def _upload(on_progress):
        client = create_pdf_client()
        try:
            return await client.upload_pdf(path.name, content, content_type, on_progress=on_progress)
        finally:
            await client.aclose()

    with Progress(TextColumn("Uploading PDF..."), BarColumn(), TaskProgressColumn(), console=console) as progress:
        task = progress.add_task("upload", total=100)
        try:
            record = asyncio.run(_upload(lambda pct: progress.update(task, completed=pct)))
        except ValidationError as e:
            raise _fail(str(e))
        except OrphanedObjectError as e:
            raise _fail(f"Failed to upload PDF. Stored object '{e.storage_path}' could not be cleaned up.")
        except (TransferError, MetadataError):
            raise _fail("Failed to upload PDF. Please try again.")

    console.print(f"[bold green]✔[/bold green] Upload successful! id={record.id}")


@app.command("list")
def list_files():
    """Lists uploaded PDFs, most recent first."""
    async def _list():
        client = create_pdf_client()
        try:
            return await client.get_pdf_files()
        finally:
            await client.aclose()

    try:
        files = asyncio.run(_list())
    except FetchError:
        raise _fail("Failed to load PDF files. Please try again.")

    if not files:
        console.print("No PDFs found. Upload your first PDF file to get started.")
        return

    table = Table(title="PDF Library")
    table.add_column("Name")
    table.add_column("Uploaded")
    table.add_column("Size", justify="right")
    table.add_column("ID", style="dim")
    for f in files:
        table.add_row(f.name, f.created_at.strftime("%b %d, %Y"), format_file_size(f.size), str(f.id))
    console.print(table)


@app.command()
def view(
    file_id: UUID,
    page: int = typer.Option(1, "--page", "-p"),
    zoom: float = typer.Option(1.0, "--zoom", "-z"),
):
    """Shows one page of a PDF at the given zoom."""
    async def _view():
        client = create_pdf_client()
        try:
            viewer = await client.open_viewer(file_id)
            if viewer.status is not ViewerStatus.ready:
                return viewer, None
            viewer.go_to_page(page)
            viewer.set_zoom(zoom)
            return viewer, await viewer.render_page()
        finally:
            await client.aclose()

    try:
        viewer, page_view = asyncio.run(_view())
    except RenderError as e:
        raise _fail(f"Failed to load PDF document: {e}")

    if viewer.status is ViewerStatus.not_found:
        console.print("PDF file not found")
        raise typer.Exit(code=1)
    if viewer.status is ViewerStatus.load_error:
        raise _fail(f"Failed to load PDF file: {viewer.error}")

    console.rule(f"[bold]{viewer.record.name}[/bold]")
    console.print(
        f"Page {page_view.page_number} / {page_view.total_pages} · "
        f"{round(page_view.scale * 100)}% · {page_view.width:.0f}x{page_view.height:.0f}pt"
    )
    console.print(page_view.text or "[dim](no text on this page)[/dim]")


@app.command()
def url(file_id: UUID, expires: Optional[int] = typer.Option(None, "--expires", min=1, help="Seconds, default 3600.")):
    """Prints a time-limited download URL."""
    async def _url():
        client = create_pdf_client()
        try:
            record = await client.get_pdf_file(file_id)
            return await client.get_pdf_url(record.storage_path, expires)
        finally:
            await client.aclose()

    try:
        signed = asyncio.run(_url())
    except NotFoundError:
        console.print("PDF file not found")
        raise typer.Exit(code=1)
    except (FetchError, RenderError) as e:
        raise _fail(str(e))
    typer.echo(signed)


@app.command()
def delete(file_id: UUID):
    """Deletes a PDF: metadata row first, then the stored object."""
    async def _delete():
        client = create_pdf_client()
        try:
            await client.delete_pdf_file(file_id)
        finally:
            await client.aclose()

    try:
        asyncio.run(_delete())
    except NotFoundError:
        console.print("PDF file not found")
        raise typer.Exit(code=1)
    except OrphanedObjectError as e:
        raise _fail(f"Record deleted, but stored object '{e.storage_path}' could not be removed.")
    except (FetchError, MetadataError) as e:
        raise _fail(f"Failed to delete PDF file: {e}")
    console.print(f"[bold green]✔[/bold green] Deleted {file_id}")
