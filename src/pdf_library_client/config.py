# Файл: src/pdf_library_client/config.py

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional

MiB = 1024 * 1024

# --- 1. Настройки PostgreSQL (таблица метаданных) ---
class PostgresConfig(BaseModel):
    user: str = "postgres"
    password: str = "postgres"
    host: str = "localhost"
    port: int = 5432
    db: str = "pdf_library"

    pool_size: int = 5
    max_overflow: int = 5
    pool_timeout: int = 30
    pool_recycle: int = 1800
    pool_pre_ping: bool = True
    application_name: str = "pdf_library_client"

    def get_pg_dsn(self) -> str:
        """Собирает DSN для SQLAlchemy из полей этого объекта."""
        return f"postgresql+asyncpg://{self.user}:{self.password}@{self.host}:{self.port}/{self.db}"

# --- 2. Настройки MinIO (хранилище байтов PDF) ---
class MinioConfig(BaseModel):
    endpoint: str = "localhost:9000"
    accesskey: str = "minioadmin"
    secretkey: str = "minioadmin"
    bucket: str = "pdfs"
    secure: bool = False

# --- 3. Политика загрузки и просмотра ---
class UploadConfig(BaseModel):
    chunk_size: int = Field(1 * MiB, gt=0)
    max_file_size: int = Field(10 * MiB, gt=0)
    signed_url_expiry: int = Field(3600, gt=0, description="seconds")


class PdfClientConfig(BaseModel):
    postgres: PostgresConfig = Field(default_factory=PostgresConfig)
    minio: MinioConfig = Field(default_factory=MinioConfig)
    upload: UploadConfig = Field(default_factory=UploadConfig)

# --- 4. Чтение из .env / окружения ---
# Переменные вида POSTGRES__HOST, MINIO__BUCKET, UPLOAD__CHUNK_SIZE.
class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_nested_delimiter='__',
        extra='ignore'
    )

    log_level: str = Field("INFO", alias="LOG_LEVEL")

    postgres: PostgresConfig = Field(default_factory=PostgresConfig)
    minio: MinioConfig = Field(default_factory=MinioConfig)
    upload: UploadConfig = Field(default_factory=UploadConfig)

    def to_client_config(self) -> PdfClientConfig:
        return PdfClientConfig(postgres=self.postgres, minio=self.minio, upload=self.upload)

# Ленивая инициализация: не валидируем окружение при импорте
_cached_settings: Optional[Settings] = None

def get_settings() -> Settings:
    """
    Возвращает синглтон-экземпляр настроек, создавая его при первом вызове.
    """
    global _cached_settings
    if _cached_settings is None:
        _cached_settings = Settings()
    return _cached_settings
