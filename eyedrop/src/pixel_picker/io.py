from __future__ import annotations

import io
import json
import logging
from pathlib import Path
from typing import BinaryIO

import requests
from PIL import Image, UnidentifiedImageError

from .config import DEFAULT_CONFIG
from .models import PickResult

logger = logging.getLogger(__name__)


class ImageLoadError(ValueError):
    pass


def read_image(
    image_path: str | Path,
    max_bytes: int = DEFAULT_CONFIG.max_image_bytes,
    timeout: float = DEFAULT_CONFIG.request_timeout,
) -> Image.Image:
    """Decode an image from a local path or an HTTP(S) URL.

    Payloads larger than ``max_bytes`` and data Pillow cannot decode raise
    ``ImageLoadError``; HTTP failures propagate from ``requests``.
    """
    path_str = str(image_path)
    if path_str.startswith(("http://", "https://")):
        response = requests.get(path_str, timeout=timeout)
        response.raise_for_status()
        content = response.content
        _check_size(len(content), max_bytes, path_str)
        return _decode(io.BytesIO(content), path_str)

    path = Path(image_path)
    if not path.exists():
        raise ImageLoadError(f"image file does not exist: {path}")
    _check_size(path.stat().st_size, max_bytes, path_str)
    with path.open("rb") as handle:
        return _decode(handle, path_str)


def write_result_json(result: PickResult | None, output_path: str | Path) -> None:
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = json.dumps(None if result is None else result.to_dict(), indent=2)
    path.write_text(payload + "\n", encoding="utf-8")


def _check_size(size: int, max_bytes: int, source: str) -> None:
    if size > max_bytes:
        logger.info("rejecting %s: %d bytes exceeds %d", source, size, max_bytes)
        raise ImageLoadError(
            f"image is {size} bytes, larger than the {max_bytes} byte limit: {source}"
        )


def _decode(stream: BinaryIO, source: str) -> Image.Image:
    try:
        with Image.open(stream) as image:
            image.load()
            return image.convert("RGBA")
    except (UnidentifiedImageError, OSError) as exc:
        raise ImageLoadError(f"not a decodable image: {source}") from exc
