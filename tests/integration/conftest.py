import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine

from pdf_library_client import PdfClient, create_pdf_client
from pdf_library_client.config import MinioConfig, PdfClientConfig, PostgresConfig
from pdf_library_client.db.base import Base


@pytest.fixture(scope="session")
def integration_config():
    """
    Поднимает PostgreSQL и MinIO один раз на сессию.
    Без Docker интеграционные тесты пропускаются.
    """
    pytest.importorskip("testcontainers")
    from testcontainers.minio import MinioContainer
    from testcontainers.postgres import PostgresContainer

    postgres = PostgresContainer("postgres:15")
    minio = MinioContainer("minio/minio:latest", access_key="minioadmin", secret_key="minioadmin")
    try:
        postgres.start()
        minio.start()
    except Exception as e:
        pytest.skip(f"Docker is not available: {e}")

    minio_config = minio.get_config()
    config = PdfClientConfig(
        postgres=PostgresConfig(
            user=postgres.username,
            password=postgres.password,
            db=postgres.dbname,
            host=postgres.get_container_host_ip(),
            port=int(postgres.get_exposed_port(5432)),
        ),
        minio=MinioConfig(
            endpoint=minio_config["endpoint"].replace("http://", ""),
            accesskey=minio_config["access_key"],
            secretkey=minio_config["secret_key"],
            secure=False,
            bucket="test-pdfs",
        ),
    )
    yield config
    postgres.stop()
    minio.stop()


@pytest_asyncio.fixture(scope="function")
async def pdf_client(integration_config: PdfClientConfig) -> PdfClient:
    """
    Чистые таблицы на каждый тест, клиент собирается фабрикой,
    как в реальном приложении.
    """
    engine = create_async_engine(integration_config.postgres.get_pg_dsn())
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    client = create_pdf_client(integration_config)
    await client.storage.check_connection()
    yield client

    await client.aclose()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()
