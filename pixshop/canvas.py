from __future__ import annotations

import io
import re
from typing import Dict, List, Optional, Tuple

from PIL import Image, UnidentifiedImageError

from .encoding import read_source
from .errors import TransportFailure
from .schema import ImageSource

# name -> [(label, width / height)]
ASPECT_PRESETS: Dict[str, List[Tuple[str, float]]] = {
    "Portrait": [("9:16", 9 / 16), ("4:5", 4 / 5), ("2:3", 2 / 3)],
    "Square": [("1:1", 1 / 1)],
    "Landscape": [("16:9", 16 / 9), ("4:3", 4 / 3), ("3:2", 3 / 2)],
    "Banner": [("2:1", 2 / 1), ("3:1", 3 / 1)],
}

ASPECT_TOLERANCE = 0.001

_HEX_RE = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


def aspect_by_label(label: str) -> float:
    for options in ASPECT_PRESETS.values():
        for name, value in options:
            if name == label:
                return value
    raise ValueError(f"Unknown aspect ratio: {label}")


def needs_expansion(current: Optional[float], original: float) -> bool:
    return bool(current) and abs(current - original) > ASPECT_TOLERANCE


def image_aspect(source: ImageSource) -> float:
    with _open(source) as img:
        return img.width / img.height


def expand_canvas(source: ImageSource, aspect: float) -> Tuple[bytes, bytes]:
    """Center the image on a transparent canvas of the given aspect.

    Returns (canvas_png, mask_png). The mask is white where new content is
    needed and black over the original pixels.
    """
    if aspect <= 0:
        raise ValueError(f"Aspect ratio must be positive, got {aspect}")
    with _open(source) as img:
        img = img.convert("RGBA")
        w, h = img.size
        if aspect > w / h:
            new_w, new_h = max(w, round(h * aspect)), h
        else:
            new_w, new_h = w, max(h, round(w / aspect))
        offset = ((new_w - w) // 2, (new_h - h) // 2)

        canvas = Image.new("RGBA", (new_w, new_h), (0, 0, 0, 0))
        canvas.paste(img, offset)

    mask = Image.new("L", (new_w, new_h), 255)
    mask.paste(0, (offset[0], offset[1], offset[0] + w, offset[1] + h))
    return _png_bytes(canvas), _png_bytes(mask)


def mask_from_alpha(source: ImageSource, threshold: int = 128) -> bytes:
    """White where the image is (mostly) transparent, black elsewhere."""
    with _open(source) as img:
        alpha = img.convert("RGBA").getchannel("A")
    mask = alpha.point(lambda a: 255 if a < threshold else 0)
    return _png_bytes(mask)


def normalize_hex_color(value: str) -> str:
    m = _HEX_RE.match((value or "").strip())
    if not m:
        raise ValueError(f"Invalid hex color: {value!r}")
    digits = m.group(1)
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    return "#" + digits.upper()


def _open(source: ImageSource) -> Image.Image:
    data, _ = read_source(source)
    try:
        return Image.open(io.BytesIO(data))
    except UnidentifiedImageError as e:
        raise TransportFailure(f"Not a readable image: {e}") from e


def _png_bytes(img: Image.Image) -> bytes:
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()
