import logging
from io import BytesIO

from minio import Minio
from minio.deleteobjects import DeleteObject
from minio.error import S3Error
from datetime import timedelta
from pdf_library_client.exceptions import MinioError
from pdf_library_client.utils.minio_async import run_io_bound
from pdf_library_client.config import MinioConfig
import urllib3

logger = logging.getLogger(__name__)
urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

# ошибки, которые SDK пробрасывает наружу: ответы S3 и транспорт
_SDK_ERRORS = (S3Error, urllib3.exceptions.HTTPError)


class MinioRepository:
    def __init__(self, settings: MinioConfig):
        http_client = None
        if settings.secure:
            http_client = urllib3.PoolManager(
                cert_reqs='CERT_NONE',
            )
        self._client = Minio(
            endpoint=settings.endpoint,
            access_key=settings.accesskey,
            secret_key=settings.secretkey,
            secure=settings.secure,
            http_client=http_client
        )
        self._bucket = settings.bucket

    async def _ensure_bucket(self):
        exists = await run_io_bound(self._client.bucket_exists, self._bucket)
        if not exists:
            await run_io_bound(self._client.make_bucket, self._bucket)
            logger.info(f"Bucket '{self._bucket}' created.")

    async def check_connection(self):
        """Проверяет соединение с MinIO и наличие бакета."""
        logger.debug(f"Checking MinIO connection and bucket '{self._bucket}' existence...")
        try:
            await self._ensure_bucket()
            logger.debug("MinIO connection and bucket presence confirmed.")
        except _SDK_ERRORS as e:
            logger.error(f"MinIO connection failed: {e}")
            raise MinioError(str(e)) from e

    async def exists(self, object_name: str) -> bool:
        try:
            await run_io_bound(self._client.stat_object, self._bucket, object_name)
            return True
        except S3Error as e:
            if e.code in ("NoSuchKey", "NoSuchObject"):
                return False
            raise MinioError(str(e)) from e
        except urllib3.exceptions.HTTPError as e:
            raise MinioError(str(e)) from e

    async def put_object(self, object_name: str, data: bytes,
                         content_type: str | None = None,
                         upsert: bool = False):
        """
        Пишет объект целиком. PUT в S3 всегда перезаписывает ключ, поэтому
        upsert=False реализован явной проверкой существования.
        """
        if not upsert and await self.exists(object_name):
            raise MinioError(f"Object '{object_name}' already exists in bucket '{self._bucket}'.")
        try:
            await run_io_bound(
                self._client.put_object,
                self._bucket,
                object_name,
                BytesIO(data),
                len(data),
                content_type=content_type or "application/octet-stream",
            )
        except _SDK_ERRORS as e:
            raise MinioError(str(e)) from e

    async def get_object(self, object_name: str) -> bytes:
        def _read() -> bytes:
            resp = self._client.get_object(self._bucket, object_name)
            try:
                return resp.read()
            finally:
                resp.close()
                resp.release_conn()

        try:
            return await run_io_bound(_read)
        except _SDK_ERRORS as e:
            raise MinioError(str(e)) from e

    async def remove_objects(self, object_names: list[str]):
        """Пакетное удаление. Отсутствующий ключ ошибкой не считается."""
        def _remove() -> list[str]:
            # remove_objects ленивый: ошибки приходят только при итерации
            errors = self._client.remove_objects(
                self._bucket, [DeleteObject(name) for name in object_names]
            )
            return [f"{err.name}: {err.message}" for err in errors]

        try:
            failed = await run_io_bound(_remove)
        except _SDK_ERRORS as e:
            raise MinioError(str(e)) from e
        if failed:
            raise MinioError(f"Failed to remove objects: {'; '.join(failed)}")

    async def get_presigned_url(self, object_name: str, expires_in_seconds: int = 3600) -> str:
        """Генерирует временную ссылку для скачивания объекта."""
        try:
            url = await run_io_bound(
                self._client.presigned_get_object,
                self._bucket,
                object_name,
                expires=timedelta(seconds=expires_in_seconds),
            )
            return url
        except _SDK_ERRORS as e:
            raise MinioError(str(e)) from e
