"""Theme classification from background luminance.

Perceived luminance is ``Y = 0.299 R + 0.587 G + 0.114 B``. Images are
classified into four bands, flat colors into two. In both cases a dark
background gets the light-text theme (``theme-white``).
"""

from __future__ import annotations

import asyncio
import io
import logging
import urllib.error
import urllib.request
from collections.abc import Callable, Iterable, Sequence

from PIL import Image, ImageStat, UnidentifiedImageError

from .exceptions import ClassificationFailure
from .models import Theme

logger = logging.getLogger(__name__)

DARK_IMAGE_MAX = 85
MID_DARK_IMAGE_MAX = 128
LIGHT_IMAGE_MIN = 170
COLOR_DARK_MAX = 186

FALLBACK_THEME = Theme.WHITE

Pixel = Sequence[int]


def luminance(r: float, g: float, b: float) -> float:
    return r * 0.299 + g * 0.587 + b * 0.114


def theme_for_luminance(value: float) -> Theme:
    """Map average image luminance to a theme.

    Bands: [0, 85) white, [85, 128) sepia, [128, 170] skyblue, (170, 255] black.
    """
    if value < DARK_IMAGE_MAX:
        return Theme.WHITE
    if value > LIGHT_IMAGE_MIN:
        return Theme.BLACK
    if value < MID_DARK_IMAGE_MAX:
        return Theme.SEPIA
    return Theme.SKYBLUE


def classify_pixels(pixels: Iterable[Pixel]) -> Theme:
    """Classify raw RGB(A) pixel data; alpha is ignored.

    Empty pixel data yields the fallback theme.
    """
    total = 0.0
    count = 0
    for pixel in pixels:
        total += luminance(pixel[0], pixel[1], pixel[2])
        count += 1
    if count == 0:
        return FALLBACK_THEME
    return theme_for_luminance(total / count)


def parse_hex_color(color: str) -> tuple[int, int, int]:
    """Convert a ``#rrggbb`` color to an RGB tuple."""
    h = color.lstrip("#")
    if len(h) != 6:
        raise ValueError(f"Expected #rrggbb color, got {color!r}")
    return int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16)


def classify_color(color: str | Pixel) -> Theme:
    """Classify a flat background color given as ``#rrggbb`` or an RGB triplet.

    Unparseable colors yield the fallback theme.
    """
    try:
        r, g, b = parse_hex_color(color) if isinstance(color, str) else tuple(color[:3])
    except ValueError:
        logger.warning(f"Cannot classify color {color!r}")
        return FALLBACK_THEME
    return Theme.WHITE if luminance(r, g, b) < COLOR_DARK_MAX else Theme.BLACK


def classify_image(image: Image.Image) -> Theme:
    """Classify a decoded image by its mean luminance."""
    rgb = image.convert("RGB")
    if rgb.width == 0 or rgb.height == 0:
        return FALLBACK_THEME
    r, g, b = ImageStat.Stat(rgb).mean[:3]
    return theme_for_luminance(luminance(r, g, b))


def _fetch_url(url: str, timeout: float) -> bytes:
    request = urllib.request.Request(url, headers={"User-Agent": "tasktab"})
    with urllib.request.urlopen(request, timeout=timeout) as response:
        return response.read()


class ImageClassifier:
    """Fetches background images and classifies them, failing soft."""

    def __init__(
        self,
        timeout: float = 10.0,
        fetch: Callable[[str, float], bytes] | None = None,
    ):
        """Initialize classifier.

        Args:
            timeout: Seconds allowed for downloading one image
            fetch: Blocking ``(url, timeout) -> bytes`` downloader
        """
        self.timeout = timeout
        self._fetch = fetch or _fetch_url

    def _sample(self, url: str) -> Theme:
        try:
            payload = self._fetch(url, self.timeout)
        except (urllib.error.URLError, OSError, ValueError) as err:
            raise ClassificationFailure(f"Cannot load {url}: {err}") from err
        try:
            with Image.open(io.BytesIO(payload)) as image:
                return classify_image(image)
        except (UnidentifiedImageError, OSError, ValueError) as err:
            raise ClassificationFailure(f"Cannot decode {url}: {err}") from err

    async def classify_url(self, url: str) -> Theme:
        """Classify the image at url; any failure yields the fallback theme."""
        try:
            theme = await asyncio.to_thread(self._sample, url)
        except ClassificationFailure as err:
            logger.warning(f"Image classification failed, using {FALLBACK_THEME.value}: {err}")
            return FALLBACK_THEME
        logger.debug(f"Classified {url} as {theme.value}")
        return theme

    def classify_color(self, color: str | Pixel) -> Theme:
        return classify_color(color)
