from __future__ import annotations

import json
import logging
from pathlib import Path

from .colors import hex_to_rgb
from .config import DEFAULT_CONFIG

logger = logging.getLogger(__name__)


class ColorHistory:
    """Most-recent-first list of picked colors, unique by hex, capped."""

    def __init__(
        self, colors: list[str] | None = None, limit: int = DEFAULT_CONFIG.history_limit
    ) -> None:
        if limit < 1:
            raise ValueError("history limit must be at least 1")
        self.limit = limit
        self._colors: list[str] = []
        for value in reversed(colors or []):
            self.push(value)

    @property
    def colors(self) -> list[str]:
        return list(self._colors)

    def __len__(self) -> int:
        return len(self._colors)

    def __contains__(self, value: object) -> bool:
        return isinstance(value, str) and value.lower() in self._colors

    def push(self, hex_value: str) -> None:
        if hex_to_rgb(hex_value) is None:
            raise ValueError(f"invalid hex color '{hex_value}'")
        normalized = hex_value.lower()
        self._colors = [normalized] + [c for c in self._colors if c != normalized]
        del self._colors[self.limit :]

    def remove(self, index: int) -> str:
        if not 0 <= index < len(self._colors):
            raise IndexError(f"history index {index} out of range")
        return self._colors.pop(index)

    def clear(self) -> None:
        self._colors = []


def load_history(path_like: str | Path, limit: int = DEFAULT_CONFIG.history_limit) -> ColorHistory:
    path = Path(path_like)
    if not path.exists():
        return ColorHistory(limit=limit)

    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"{path}: invalid json history ({exc})") from exc
    if not isinstance(payload, list):
        raise ValueError(f"history file at {path} must contain a list of hex strings")

    colors: list[str] = []
    for value in payload:
        if isinstance(value, str) and hex_to_rgb(value) is not None:
            colors.append(value)
        else:
            logger.warning("dropping malformed history entry %r from %s", value, path)
    return ColorHistory(colors, limit=limit)


def save_history(history: ColorHistory, path_like: str | Path) -> None:
    path = Path(path_like)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(history.colors, indent=2) + "\n", encoding="utf-8")
