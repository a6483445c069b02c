"""Runtime configuration for tasktab."""

from __future__ import annotations

import json
import os
import re
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from .core.exceptions import ConfigError
from .core.models import Background, Theme

TRUSTED_BACKGROUND_PREFIX = "https://images.unsplash.com/"
NEUTRAL_BACKGROUND_COLOR = "#f4f4f9"

DEFAULT_BACKGROUNDS: tuple[Background, ...] = (
    Background(
        url="https://images.unsplash.com/photo-1469474968028-56623f02e42e?q=80&w=2072&auto=format&fit=crop",
        theme=Theme.SEPIA,
    ),
    Background(
        url="https://images.unsplash.com/photo-1506744038136-46273834b3fb?q=80&w=2070&auto=format&fit=crop",
        theme=Theme.WHITE,
    ),
    Background(
        url="https://images.unsplash.com/photo-1470770841072-f978cf4d019e?q=80&w=2070&auto=format&fit=crop",
        theme=Theme.SKYBLUE,
    ),
    Background(
        url="https://images.unsplash.com/photo-1443926818681-717d074a57af?auto=format&fit=crop&q=80&w=1760",
    ),
)

DEFAULT_COLOR_PALETTE: tuple[str, ...] = (
    NEUTRAL_BACKGROUND_COLOR,
    "#2c3e50",
    "#8e44ad",
    "#2980b9",
    "#16a085",
    "#d35400",
)

_HEX_COLOR_RE = re.compile(r"^#[0-9a-fA-F]{6}$")


def _expand(raw: str) -> Path:
    return Path(os.path.expanduser(raw)).resolve()


def _parse_backgrounds(raw: object) -> tuple[Background, ...]:
    if not isinstance(raw, list):
        raise TypeError("default_backgrounds must be a list")
    backgrounds: list[Background] = []
    for item in raw:
        if isinstance(item, str):
            backgrounds.append(Background(url=item))
        elif isinstance(item, dict) and isinstance(item.get("url"), str):
            backgrounds.append(Background.from_dict(item))
        else:
            raise TypeError(f"Invalid default background entry: {item!r}")
    return tuple(backgrounds)


@dataclass(frozen=True)
class Config:
    """Runtime configuration loaded from config.json."""

    data_dir: Path
    log_file: Path
    trusted_background_prefix: str = TRUSTED_BACKGROUND_PREFIX
    default_backgrounds: tuple[Background, ...] = DEFAULT_BACKGROUNDS
    color_palette: Sequence[str] = DEFAULT_COLOR_PALETTE
    classification_timeout_seconds: float = 10.0
    mirror_failed_writes: bool = True

    @property
    def sync_store_path(self) -> Path:
        return self.data_dir / "sync.json"

    @property
    def local_store_path(self) -> Path:
        return self.data_dir / "local.json"

    @classmethod
    def from_dict(cls, payload: dict) -> Config:
        """Create a Config object from a raw dictionary."""
        data_dir = _expand(payload.get("data_dir", "~/.local/share/tasktab"))
        log_file = _expand(payload.get("log_file", "~/.cache/tasktab/tasktab.log"))

        prefix = str(payload.get("trusted_background_prefix", TRUSTED_BACKGROUND_PREFIX))
        if not prefix.startswith("https://"):
            raise ValueError(f"trusted_background_prefix must be an https URL, got {prefix}")

        if "default_backgrounds" in payload:
            default_backgrounds = _parse_backgrounds(payload["default_backgrounds"])
        else:
            default_backgrounds = DEFAULT_BACKGROUNDS

        palette = tuple(payload.get("color_palette", DEFAULT_COLOR_PALETTE))
        for color in palette:
            if not isinstance(color, str) or not _HEX_COLOR_RE.match(color):
                raise ValueError(f"color_palette entries must be #rrggbb, got {color!r}")

        timeout = float(payload.get("classification_timeout_seconds", 10))
        if timeout <= 0:
            raise ValueError(f"classification_timeout_seconds must be positive, got {timeout}")

        return cls(
            data_dir=data_dir,
            log_file=log_file,
            trusted_background_prefix=prefix,
            default_backgrounds=default_backgrounds,
            color_palette=palette,
            classification_timeout_seconds=timeout,
            mirror_failed_writes=bool(payload.get("mirror_failed_writes", True)),
        )


def load_config(path: Path | None) -> Config:
    """Load configuration from the provided path.

    A missing file yields the defaults; an unreadable or invalid one raises
    ConfigError.
    """
    if path is None or not path.exists():
        return Config.from_dict({})
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except (OSError, json.JSONDecodeError) as err:
        raise ConfigError(f"Cannot read config {path}: {err}") from err
    if not isinstance(data, dict):
        raise ConfigError(f"Config {path} must contain a JSON object")
    try:
        return Config.from_dict(data)
    except (TypeError, ValueError, KeyError) as err:
        raise ConfigError(f"Invalid config {path}: {err}") from err
