from __future__ import annotations

import csv
import json
from datetime import datetime, timezone
from pathlib import Path

from .colors import hex_to_rgb
from .models import Palette


class PaletteValidationError(ValueError):
    pass


class PaletteBook:
    """Named palettes, newest first."""

    def __init__(self, palettes: list[Palette] | None = None) -> None:
        self._palettes: list[Palette] = list(palettes or [])

    @property
    def palettes(self) -> list[Palette]:
        return list(self._palettes)

    def __len__(self) -> int:
        return len(self._palettes)

    def create(
        self,
        name: str,
        colors: list[str],
        created_at: str | None = None,
    ) -> Palette:
        palette = build_palette(name, colors, created_at, location="new palette")
        self._palettes.insert(0, palette)
        return palette

    def delete(self, index: int) -> Palette:
        if not 0 <= index < len(self._palettes):
            raise IndexError(f"palette index {index} out of range")
        return self._palettes.pop(index)

    def copy_text(self, index: int) -> str:
        if not 0 <= index < len(self._palettes):
            raise IndexError(f"palette index {index} out of range")
        return ", ".join(self._palettes[index].colors)


def build_palette(
    name: object,
    colors: object,
    created_at: object = None,
    location: str = "palette",
) -> Palette:
    clean_name = _as_clean_str(name)
    if not clean_name:
        raise PaletteValidationError(f"{location}: missing required field 'name'")

    if not isinstance(colors, (list, tuple)) or not colors:
        raise PaletteValidationError(f"{location}: palette needs at least one color")

    normalized: list[str] = []
    for value in colors:
        if not isinstance(value, str) or hex_to_rgb(value.strip()) is None:
            raise PaletteValidationError(f"{location}: invalid hex color '{value}'")
        normalized.append(value.strip().lower())

    stamp = _as_clean_str(created_at) or datetime.now(timezone.utc).isoformat(
        timespec="seconds"
    )
    return Palette(name=clean_name, colors=tuple(normalized), created_at=stamp)


def load_palette_book(path_like: str | Path, missing_ok: bool = True) -> PaletteBook:
    path = Path(path_like)
    if not path.exists():
        if missing_ok:
            return PaletteBook()
        raise PaletteValidationError(f"palette file does not exist: {path}")

    if path.suffix.lower() == ".csv":
        palettes = _load_csv(path)
    elif path.suffix.lower() == ".json":
        palettes = _load_json(path)
    else:
        raise PaletteValidationError(
            f"unsupported palette format '{path.suffix}'. Use .csv or .json"
        )
    return PaletteBook(palettes)


def save_palette_book(book: PaletteBook, path_like: str | Path) -> None:
    path = Path(path_like)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = json.dumps([palette.to_dict() for palette in book.palettes], indent=2)
    path.write_text(payload + "\n", encoding="utf-8")


def _load_csv(path: Path) -> list[Palette]:
    """Rows of ``name,hex[,created_at]``; rows sharing a name form one palette."""
    with path.open("r", encoding="utf-8") as handle:
        reader = csv.DictReader(handle)
        if not reader.fieldnames:
            raise PaletteValidationError(f"palette csv has no header: {path}")

        grouped: dict[str, list[str]] = {}
        stamps: dict[str, str | None] = {}
        for idx, row in enumerate(reader, start=2):
            normalized = {
                str(key).strip().lower(): value
                for key, value in row.items()
                if key is not None
            }
            name = _as_clean_str(normalized.get("name"))
            hex_value = _as_clean_str(normalized.get("hex"))
            if not name:
                raise PaletteValidationError(f"{path}:{idx}: missing required field 'name'")
            if not hex_value:
                raise PaletteValidationError(f"{path}:{idx}: missing required field 'hex'")
            grouped.setdefault(name, []).append(hex_value)
            stamps.setdefault(name, _as_clean_str(normalized.get("created_at")))

    return [
        build_palette(name, colors, stamps.get(name), location=f"{path}:{name}")
        for name, colors in grouped.items()
    ]


def _load_json(path: Path) -> list[Palette]:
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise PaletteValidationError(f"{path}: invalid json ({exc})") from exc

    if isinstance(payload, dict):
        if "palettes" not in payload or not isinstance(payload["palettes"], list):
            raise PaletteValidationError(
                f"json palettes at {path} must be a list or include a 'palettes' list"
            )
        records = payload["palettes"]
    elif isinstance(payload, list):
        records = payload
    else:
        raise PaletteValidationError(
            f"json palettes at {path} must be a list or object with 'palettes'"
        )

    palettes: list[Palette] = []
    for idx, record in enumerate(records, start=1):
        if not isinstance(record, dict):
            raise PaletteValidationError(
                f"invalid palette entry at {path}:{idx} (expected object)"
            )
        palettes.append(
            build_palette(
                record.get("name"),
                record.get("colors"),
                record.get("createdAt", record.get("created_at")),
                location=f"{path}:{idx}",
            )
        )
    return palettes


def _as_clean_str(value: object) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text if text else None
