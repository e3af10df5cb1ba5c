from .minio_async import run_io_bound

__all__ = ["run_io_bound"]
