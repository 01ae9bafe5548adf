"""Application configuration persistence.

Stores lightweight UI state between sessions: window geometry, the last
view, the Gemini API key, the preferred SQL dialect and viewport
preferences. The schema itself is never persisted.

- Pure logic (no Qt import) so it can be unit-tested headless.
- Explicit ``version`` field; an unknown version resets to defaults but
  keeps the API key.
- Corrupt files produce defaults instead of raising.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from config import settings
from domain.models import DBType, ViewMode

__all__ = ["AppConfig", "load_config", "save_config", "CONFIG_VERSION", "DEFAULT_FILENAME"]

logger = logging.getLogger(__name__)

CONFIG_VERSION = 1

DEFAULT_FILENAME = "app_state.json"


@dataclass(slots=True)
class AppConfig:
    """Serializable application state.

    Attributes
    ----------
    version: Schema version for migration handling.
    window_x, window_y, window_w, window_h: Last window geometry (None if unknown).
    maximized: Whether the window was maximized at shutdown.
    last_view: Last active view mode value.
    api_key: Gemini API key entered in the upload view.
    sql_dialect: Dialect shown in the SQL preview.
    zoom_follows_pointer: Anchor wheel zoom at the cursor instead of the origin.
    zoom_sensitivity: Wheel zoom factor ``k`` in ``exp(-deltaY * k)``.
    """

    version: int = CONFIG_VERSION
    window_x: Optional[int] = None
    window_y: Optional[int] = None
    window_w: Optional[int] = None
    window_h: Optional[int] = None
    maximized: bool = False
    last_view: str = ViewMode.UPLOAD.value
    api_key: str = ""
    sql_dialect: str = DBType.POSTGRES.value
    zoom_follows_pointer: bool = False
    zoom_sensitivity: float = settings.ZOOM_SENSITIVITY

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AppConfig":
        dialect = data.get("sql_dialect", DBType.POSTGRES.value)
        if dialect not in {d.value for d in DBType}:
            dialect = DBType.POSTGRES.value
        last_view = data.get("last_view", ViewMode.UPLOAD.value)
        if last_view not in {m.value for m in ViewMode}:
            last_view = ViewMode.UPLOAD.value
        return cls(
            version=int(data.get("version", CONFIG_VERSION)),
            window_x=data.get("window_x"),
            window_y=data.get("window_y"),
            window_w=data.get("window_w"),
            window_h=data.get("window_h"),
            maximized=bool(data.get("maximized", False)),
            last_view=last_view,
            api_key=str(data.get("api_key") or ""),
            sql_dialect=dialect,
            zoom_follows_pointer=bool(data.get("zoom_follows_pointer", False)),
            zoom_sensitivity=float(data.get("zoom_sensitivity", settings.ZOOM_SENSITIVITY)),
        )

    def is_geometry_complete(self) -> bool:
        return None not in (self.window_x, self.window_y, self.window_w, self.window_h)


def _resolve_path(base_dir: str | Path | None) -> Path:
    base = Path(base_dir) if base_dir else Path(settings.DATA_DIR)
    return base / DEFAULT_FILENAME


def load_config(base_dir: str | Path | None = None) -> AppConfig:
    path = _resolve_path(base_dir)
    if not path.exists():
        return AppConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        cfg = AppConfig.from_dict(data)
    except (OSError, ValueError, TypeError, AttributeError) as e:
        logger.warning("ignoring unreadable config %s: %s", path, e)
        return AppConfig()
    if cfg.version != CONFIG_VERSION:
        return AppConfig(api_key=cfg.api_key)
    return cfg


def save_config(cfg: AppConfig, base_dir: str | Path | None = None) -> Path:
    """Persist config atomically; returns the path written."""
    path = _resolve_path(base_dir)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(json.dumps(cfg.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")
    tmp.replace(path)
    return path
