# === FILE: site_binder/config.py ===
"""
Модуль для загрузки и валидации конфигурации SiteBinder.
Используется Pydantic для описания схемы и проверки данных.
"""
from __future__ import annotations

import errno
import json
import os
import re
from pathlib import Path
from typing import Any, Callable, Dict, List, Literal, Optional, Tuple, Union

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from site_binder.layout.engine import PAGE_SIZES

__all__ = ("ProxyConfig", "BinderConfig", "load_config", "ALLORIGINS_TEMPLATE")

#: Public relay used by the browser build; opt-in only.
ALLORIGINS_TEMPLATE = "https://api.allorigins.win/get?url={url}"


def _accept_all(url: str) -> bool:
    return True


class ProxyConfig(BaseModel):
    """Fallback relay that returns the target body inside a JSON envelope."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    url_template: str = Field(..., description="Relay URL, `{url}` is replaced by the encoded target.")
    envelope_key: str = Field("contents", min_length=1, description="JSON key holding the original body.")

    @field_validator("url_template")
    def _check_placeholder(cls, v: str) -> str:
        if "{url}" not in v:
            raise ValueError("url_template must contain a '{url}' placeholder")
        if not v.startswith(("http://", "https://")):
            raise ValueError("url_template must be an http(s) URL")
        return v


class BinderConfig(BaseModel):
    """Параметры одного запуска crawl → PDF."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    max_pages: int = Field(200, gt=0, description="Жесткий лимит по числу страниц.")
    same_origin_only: bool = Field(True, description="Ограничить обход схемой и хостом seed.")
    wait_after_load_ms: int = Field(0, ge=0, description="Зарезервировано для JS-страниц, не используется.")
    page_format: Literal["A4", "Letter"] = Field("A4", description="Формат страниц PDF.")
    scale: float = Field(1.0, ge=0.1, le=2.0, description="Множитель размеров шрифтов.")
    url_filter: Callable[[str], bool] = Field(
        _accept_all, exclude=True, description="Дополнительный фильтр URL (True — включить)."
    )

    timeout: float = Field(10.0, gt=0, description="Таймаут запроса при обнаружении (секунд).")
    render_timeout: float = Field(30.0, gt=0, description="Таймаут запроса страницы для рендера (секунд).")
    user_agent: str = Field("SiteBinder/0.1", min_length=1, description="Заголовок User-Agent.")
    proxy: Optional[ProxyConfig] = Field(None, description="Резервный relay при сетевой ошибке.")
    exclude_patterns: List[str] = Field(default_factory=list, description="Доп. regex для исключения URL.")
    max_blocks: int = Field(20, gt=0, description="Макс. число блоков контента на страницу сайта.")
    margin: float = Field(50.0, ge=0, description="Поля страницы (pt).")
    cache: bool = Field(True, description="Кэшировать успешные ответы в пределах запуска.")

    @field_validator("exclude_patterns")
    def _compile_patterns(cls, v: List[str]) -> List[str]:
        for pattern in v:
            try:
                re.compile(pattern)
            except re.error as exc:
                raise ValueError(f"Bad exclude pattern {pattern!r}: {exc}") from exc
        return v

    @model_validator(mode="after")
    def _check_margin(self) -> BinderConfig:
        width, height = PAGE_SIZES[self.page_format]
        if 2 * self.margin >= min(width, height):
            raise ValueError(
                f"margin {self.margin} leaves no content area on a {self.page_format} page "
                f"({width:.0f}x{height:.0f} pt)"
            )
        return self

    def with_overrides(self, **overrides: Any) -> BinderConfig:
        """Return a validated copy with *overrides* applied (``None`` values ignored)."""
        data = self.model_dump(exclude={"url_filter"})
        data.update({k: v for k, v in overrides.items() if v is not None})
        data.setdefault("url_filter", self.url_filter)
        return type(self).model_validate(data)


_DEFAULT_CFG = Path("configs/default.yaml")

_Parser = Callable[[str], Any]

#: Suffix → (format name, parser, parser error type).
_READERS: Dict[str, Tuple[str, _Parser, type]] = {
    ".yaml": ("YAML", yaml.safe_load, yaml.YAMLError),
    ".yml": ("YAML", yaml.safe_load, yaml.YAMLError),
    ".json": ("JSON", json.loads, json.JSONDecodeError),
}


def _read_mapping(path: Path) -> Dict[str, Any]:
    """Parse *path* by its suffix; the top level must be a mapping."""
    try:
        kind, parse, error_type = _READERS[path.suffix.lower()]
    except KeyError:
        raise ValueError(f"Неподдерживаемый формат конфига: {path.suffix}") from None
    try:
        data = parse(path.read_text(encoding="utf-8"))
    except error_type as exc:
        raise ValueError(f"Неправильный {kind} в {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise TypeError(f"Конфиг {path} должен быть mapping, получено {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None]) -> BinderConfig:
    """
    Читает YAML или JSON и возвращает проверенный BinderConfig.

    Без пути берётся configs/default.yaml из рабочего каталога, а если его
    нет, значения по умолчанию. Ошибки схемы всплывают как
    pydantic.ValidationError.
    """
    if path is None:
        if not _DEFAULT_CFG.is_file():
            return BinderConfig()
        return BinderConfig(**_read_mapping(_DEFAULT_CFG))

    target = Path(path).expanduser().resolve()
    if not target.is_file():
        raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(target))
    return BinderConfig(**_read_mapping(target))
