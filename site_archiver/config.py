"""
Модуль для загрузки и валидации конфигурации SiteArchiver.
Используется Pydantic для описания схемы и проверки данных.

Конфиг-файл необязателен: всё, что нужно для запуска, приходит из
аргументов командной строки, файл лишь переопределяет значения по умолчанию.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Dict, Literal, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, HttpUrl, field_validator


class FetcherConfig(BaseModel):
    """Настройки получения страниц из авторизованной сессии."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: Literal["browser", "http"] = Field("browser", description="Браузер (Playwright) или HTTP (aiohttp).")
    browser: Literal["chromium", "firefox", "webkit"] = Field("chromium", description="Движок Playwright.")
    cdp_url: Optional[str] = Field(None, description="CDP-адрес уже запущенного Chrome с активной сессией.")
    user_data_dir: Optional[Path] = Field(None, description="Каталог постоянного профиля браузера.")
    storage_state: Optional[Path] = Field(None, description="JSON с cookies/localStorage (Playwright storage state).")
    headless: bool = Field(False, description="Запуск браузера без окна.")
    page_load_wait: float = Field(5.0, ge=0, description="Пауза после загрузки страницы (секунд).")
    retries: int = Field(3, ge=1, description="Число попыток получить страницу.")
    retry_wait: float = Field(2.0, ge=0, description="Пауза между попытками (секунд).")
    timeout: float = Field(30.0, gt=0, description="Таймаут на одну навигацию/запрос (секунд).")
    user_agent: Optional[str] = Field(None, min_length=1, description="Заголовок User-Agent.")


class ArchiverConfig(BaseModel):
    """Конфигурация для одного запуска архивации."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    base_url: HttpUrl = Field(..., description="Корневой URL; всё вне этого префикса не обходится.")
    output_dir: Path = Field(..., description="Каталог для .webarchive и .html файлов.")
    delay: float = Field(5.0, ge=0, description="Пауза между страницами (секунд).")
    link_parser: Literal["regex", "soup"] = Field("regex", description="Способ извлечения ссылок.")
    max_pages: Optional[int] = Field(None, ge=1, description="Лимит по числу страниц (нет лимита по умолчанию).")
    max_depth: Optional[int] = Field(None, ge=0, description="Максимальная глубина обхода (нет лимита по умолчанию).")
    fetcher: FetcherConfig = Field(default_factory=FetcherConfig)

    @field_validator("output_dir", mode="before")
    def _expand_user(cls, v: Any) -> Any:
        if isinstance(v, (str, Path)):
            return Path(v).expanduser()
        return v


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


def read_config_file(path: Union[str, Path]) -> dict[str, Any]:
    """Читает YAML или JSON и возвращает сырой словарь."""
    path_obj = Path(path).expanduser().resolve()
    if not path_obj.is_file():
        raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return _read_yaml(path_obj)
    if suffix == ".json":
        return _read_json(path_obj)
    raise ValueError(f"Неподдерживаемый формат конфига: {suffix}")


def _merge(data: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(data)
    for key, value in overrides.items():
        if value is None:
            continue
        if key == "fetcher" and isinstance(value, dict):
            fetcher = dict(merged.get("fetcher") or {})
            fetcher.update({k: v for k, v in value.items() if v is not None})
            merged["fetcher"] = fetcher
        else:
            merged[key] = value
    return merged


def load_config(path: Union[str, Path, None] = None, **overrides: Any) -> ArchiverConfig:
    """
    Собирает проверенный объект ArchiverConfig.

    Значения из файла *path* (если задан) перекрываются *overrides*;
    ``None`` в overrides означает «не задано». Ключ ``fetcher`` сливается
    по полям, а не заменяется целиком.
    """
    data = read_config_file(path) if path is not None else {}
    return ArchiverConfig(**_merge(data, overrides))
