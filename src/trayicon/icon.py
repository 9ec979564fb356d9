"""Icon decoding into the ARGB32 pixmap layout used by status items.

Any buffer Pillow can read is accepted. ICO files resolve to their largest
entry, which is what Pillow's ICO plugin loads by default.
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Optional, Tuple, Union

from PIL import Image, UnidentifiedImageError

from .errors import IconLoadingError

LOGGER = logging.getLogger("trayicon.icon")

Pixmap = Tuple[int, int, bytes]


class Icon:
    """Decoded icon holding ARGB32 pixels in network byte order."""

    __slots__ = ("_width", "_height", "_argb")

    def __init__(self, width: int, height: int, argb_pixels: bytes) -> None:
        if width <= 0 or height <= 0:
            raise IconLoadingError(f"Invalid icon size {width}x{height}")
        if len(argb_pixels) != width * height * 4:
            raise IconLoadingError(
                f"Pixel buffer has {len(argb_pixels)} bytes, "
                f"expected {width * height * 4}"
            )
        self._width = width
        self._height = height
        self._argb = bytes(argb_pixels)

    @classmethod
    def from_image(cls, image: Image.Image) -> "Icon":
        """Convert a Pillow image to an icon."""
        rgba = image.convert("RGBA")
        red, green, blue, alpha = rgba.split()
        argb = Image.merge("RGBA", (alpha, red, green, blue))
        return cls(rgba.width, rgba.height, argb.tobytes())

    @classmethod
    def from_buffer(
        cls,
        data: bytes,
        width: Optional[int] = None,
        height: Optional[int] = None,
    ) -> "Icon":
        """Decode an encoded image buffer (ICO, PNG, ...).

        Args:
            data: Encoded image bytes.
            width: Optional target width; the image is resized when given.
            height: Optional target height; defaults to ``width``.

        Raises:
            IconLoadingError: If the buffer cannot be decoded.
        """
        try:
            with Image.open(io.BytesIO(data)) as image:
                image.load()
                if width is not None or height is not None:
                    size = (width or height, height or width)
                    image = image.convert("RGBA").resize(size, Image.LANCZOS)
                return cls.from_image(image)
        except (UnidentifiedImageError, OSError, ValueError, SyntaxError) as exc:
            LOGGER.debug("Icon decode failed", exc_info=True)
            raise IconLoadingError(f"Unable to decode icon: {exc}") from exc

    @classmethod
    def from_path(cls, path: Union[str, Path], **kwargs: Optional[int]) -> "Icon":
        """Read and decode an icon file."""
        try:
            data = Path(path).read_bytes()
        except OSError as exc:
            raise IconLoadingError(f"Unable to read icon {path}") from exc
        return cls.from_buffer(data, **kwargs)

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def argb_pixels(self) -> bytes:
        """Return pixels as A, R, G, B bytes, row-major."""
        return self._argb

    def to_pixmap(self) -> Pixmap:
        """Return the ``(width, height, data)`` triple of an ``a(iiay)`` entry."""
        return (self._width, self._height, self._argb)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Icon):
            return NotImplemented
        return (
            self._width == other._width
            and self._height == other._height
            and self._argb == other._argb
        )

    def __hash__(self) -> int:
        return hash((self._width, self._height, self._argb))

    def __repr__(self) -> str:
        return f"Icon({self._width}x{self._height})"
