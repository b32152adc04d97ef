from functools import lru_cache
import json
from urllib.parse import urlsplit

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = Field(default="Paraphraser API", alias="APP_NAME")
    environment: str = Field(default="development", alias="ENVIRONMENT")
    api_prefix: str = Field(default="/v1", alias="API_PREFIX")

    redis_url: str = Field(default="redis://localhost:6379/0", alias="REDIS_URL")
    redis_socket_timeout_seconds: float = Field(default=2.0, alias="REDIS_SOCKET_TIMEOUT_SECONDS")

    cors_allowed_origins: str = Field(default="http://localhost:3000", alias="CORS_ALLOWED_ORIGINS")
    cors_allow_origin_regex: str = Field(default="", alias="CORS_ALLOW_ORIGIN_REGEX")

    sentry_dsn: str = Field(default="", alias="SENTRY_DSN")

    anthropic_api_key: str = Field(default="", alias="ANTHROPIC_API_KEY")
    anthropic_max_retries: int = Field(default=2, ge=0, alias="ANTHROPIC_MAX_RETRIES")
    paraphrase_model: str = Field(default="claude-opus-4-6", alias="PARAPHRASE_MODEL")
    detection_model: str = Field(default="claude-haiku-4-5-20251001", alias="DETECTION_MODEL")
    paraphrase_max_tokens: int = Field(default=4096, alias="PARAPHRASE_MAX_TOKENS")
    score_max_tokens: int = Field(default=256, alias="SCORE_MAX_TOKENS")
    detect_max_tokens: int = Field(default=512, alias="DETECT_MAX_TOKENS")
    paraphrase_timeout_seconds: float = Field(default=90.0, alias="PARAPHRASE_TIMEOUT_SECONDS")
    detect_timeout_seconds: float = Field(default=30.0, alias="DETECT_TIMEOUT_SECONDS")

    chunk_size: int = Field(default=3000, gt=0, alias="CHUNK_SIZE")
    score_sample_chars: int = Field(default=3000, gt=0, alias="SCORE_SAMPLE_CHARS")
    refine_threshold: int = Field(default=50, ge=0, le=100, alias="REFINE_THRESHOLD")
    max_text_chars: int = Field(default=50_000, alias="MAX_TEXT_CHARS")
    min_detect_words: int = Field(default=10, alias="MIN_DETECT_WORDS")

    rate_limit_window_seconds: int = Field(default=60, alias="RATE_LIMIT_WINDOW_SECONDS")
    paraphrase_rate_limit: int = Field(default=20, alias="PARAPHRASE_RATE_LIMIT")
    detect_rate_limit: int = Field(default=30, alias="DETECT_RATE_LIMIT")
    parse_file_rate_limit: int = Field(default=10, alias="PARSE_FILE_RATE_LIMIT")

    max_upload_bytes: int = Field(default=5 * 1024 * 1024, alias="MAX_UPLOAD_BYTES")

    @field_validator("environment", mode="before")
    @classmethod
    def normalize_environment(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower() or "development"
        return value

    @staticmethod
    def _normalize_origin(origin: str) -> str:
        candidate = origin.strip().strip("'\"")
        if not candidate:
            return ""

        if "://" not in candidate:
            candidate = f"https://{candidate}"

        parsed = urlsplit(candidate)
        if not parsed.scheme or not parsed.netloc:
            return ""

        # CORS matching is exact on scheme+host+port; paths must be removed.
        return f"{parsed.scheme}://{parsed.netloc}".rstrip("/")

    @property
    def cors_origins(self) -> list[str]:
        raw = self.cors_allowed_origins.strip()
        if not raw:
            return []

        values: list[str]
        if raw.startswith("["):
            try:
                parsed = json.loads(raw)
                if isinstance(parsed, list):
                    values = [str(item) for item in parsed]
                else:
                    values = [raw]
            except json.JSONDecodeError:
                values = [raw]
        else:
            values = raw.split(",")

        normalized = [self._normalize_origin(value) for value in values]
        return [origin for origin in normalized if origin]

    @property
    def cors_origin_regex(self) -> str | None:
        value = self.cors_allow_origin_regex.strip()
        return value or None


@lru_cache
def get_settings() -> Settings:
    return Settings()
