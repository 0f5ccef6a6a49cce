"""
Модуль для загрузки и валидации конфигурации SiteDigest.
Используется Pydantic для описания схемы и проверки данных.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, List, Optional, Union

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    SecretStr,
    field_validator,
    model_validator,
)

__all__ = [
    "RetryConfig",
    "CrawlOptions",
    "CrawlConfig",
    "SummarizerConfig",
    "ServiceConfig",
    "load_config",
]

DEFAULT_SYSTEM_PROMPT = (
    "You are an expert analyst of websites and the projects behind them. "
    "Evaluate the purpose, offering, audience, team and risks described by the pages. "
    "Structure the answer with clear headings (Overview, Use Case, Roadmap, Team, "
    "Risks, Summary); keep it concise but complete."
)


class RetryConfig(BaseModel):
    """Параметры экспоненциального backoff для сетевых ошибок."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    initial_interval: float = Field(0.5, ge=0, description="Первая пауза перед повтором (секунд).")
    multiplier: float = Field(1.5, ge=1, description="Множитель роста паузы.")
    randomization_factor: float = Field(0.5, ge=0, le=1, description="Доля случайного разброса.")
    max_interval: float = Field(60.0, ge=0, description="Верхняя граница одной паузы (секунд).")
    max_elapsed_time: float = Field(900.0, ge=0, description="Общий бюджет повторов (секунд).")
    max_attempts: Optional[int] = Field(None, ge=1, description="Лимит попыток; None означает без лимита.")


class CrawlOptions(BaseModel):
    """Настройки обхода, общие для всех стартовых URL."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    max_pages: int = Field(100, ge=1, description="Порог числа страниц, проверяется между пачками.")
    concurrency: int = Field(5, ge=1, description="Размер пачки и число параллельных запросов.")
    max_content_length: int = Field(10_000, ge=0, description="Лимит суммарной длины абзацев.")
    timeout: float = Field(30.0, gt=0, description="Таймаут на один запрос (секунд).")
    request_delay: float = Field(0.5, ge=0, description="Пауза перед каждой попыткой (секунд).")
    user_agent: str = Field("SiteDigestBot/1.0", min_length=1, description="Заголовок User-Agent.")
    blocked_servers: List[str] = Field(
        default_factory=lambda: ["cloudflare"],
        description="Подстроки заголовка Server, означающие защиту от ботов.",
    )
    challenge_markers: List[str] = Field(
        default_factory=lambda: ["Attention Required!", "Checking your browser"],
        description="Подстроки тела ответа со страницей проверки.",
    )
    retry: RetryConfig = Field(default_factory=RetryConfig)

    @field_validator("blocked_servers")
    def _lower_servers(cls, v: List[str]) -> List[str]:
        return [s.lower() for s in v if s]

    def for_url(self, url: str) -> CrawlConfig:
        """Собирает CrawlConfig для конкретного стартового URL."""
        return CrawlConfig(start_url=url, **self.model_dump())


class CrawlConfig(CrawlOptions):
    """Конфигурация одного обхода."""

    start_url: HttpUrl = Field(..., description="Стартовый URL; обход не покидает его домен.")


def _env_secret(name: str) -> Optional[SecretStr]:
    value = os.environ.get(name)
    return SecretStr(value) if value else None


class SummarizerConfig(BaseModel):
    """Настройки OpenAI-совместимого сервиса суммаризации."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    base_url: HttpUrl = Field("https://api.openai.com/v1", description="Базовый URL API.")
    model: str = Field("gpt-4-turbo-preview", min_length=1)
    api_key: Optional[SecretStr] = Field(
        default_factory=lambda: _env_secret("OPENAI_API_KEY"),
        description="Ключ API; по умолчанию берётся из OPENAI_API_KEY.",
    )
    timeout: float = Field(120.0, gt=0)
    temperature: float = Field(0.7, ge=0, le=2)
    max_tokens: int = Field(4000, ge=1)
    system_prompt: str = Field(DEFAULT_SYSTEM_PROMPT, min_length=1)


class ServiceConfig(BaseModel):
    """Конфигурация сервиса заданий (HTTP API + параметры обхода)."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    host: str = Field("127.0.0.1", min_length=1)
    port: int = Field(3000, ge=1, le=65535)
    crawl: CrawlOptions = Field(default_factory=CrawlOptions)
    summarizer: SummarizerConfig = Field(default_factory=SummarizerConfig)
    secret_key: Optional[SecretStr] = Field(
        default_factory=lambda: _env_secret("SITE_DIGEST_SECRET_KEY"),
        description="Секрет подписи токенов для внешнего слоя авторизации.",
    )

    @model_validator(mode="after")
    def _check_secret(self) -> ServiceConfig:
        if self.secret_key is not None and not self.secret_key.get_secret_value().strip():
            raise ValueError("secret_key must not be blank")
        return self


_DEFAULT_CFG = Path("configs/default.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Неправильный YAML в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень YAML должен быть mapping, получено {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Неправильный JSON в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень JSON должен быть mapping, получено {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None]) -> ServiceConfig:
    """
    Читает YAML или JSON и возвращает проверенный объект ServiceConfig.
    При отсутствии файла конфига бросает FileNotFoundError.
    """
    if path is None:
        if not _DEFAULT_CFG.exists():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(_DEFAULT_CFG))
        path_obj = _DEFAULT_CFG
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ValueError(f"Неподдерживаемый формат конфига: {suffix}")

    return ServiceConfig(**data)
