"""
Snapshot export of a rendered report into a downloadable JPG.

The report contains photos hosted on another origin. Pixels from such a
source cannot be read back from the raster surface ("tainted"), so before
rasterizing every image source is fetched and inlined as a `data:` URI:

    1. enumerate the image references of the render target,
    2. fetch each source (through the image proxy for hosts that block
       reads) and encode the bytes as a data URI,
    3. swap every source to its data URI, remembering the originals,
    4. let the target repaint with the inlined data and wait briefly,
    5. rasterize at a fixed upscale factor on a solid background,
    6. restore the original sources (always, on every exit path),
    7. encode as JPEG under a name derived from the match date and opponent.

A failed fetch keeps that image's original source: the export still runs and
that one picture may come out blank.
"""

from __future__ import annotations
import base64
import logging
import re
import time
from dataclasses import dataclass
from io import BytesIO
from typing import List, Optional, Protocol, Tuple
from urllib.parse import quote, urljoin, urlsplit

import requests
from PIL import Image

from common.constants import (
    EXPORT_BACKGROUND, EXPORT_SCALE, JPEG_QUALITY, PROXY_BASE, PROXY_HOSTS,
    REPAINT_DELAY_SEC, USER_AGENT,
)
from common.errors import ExportError
from models.match_model import MatchRecord

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME = re.compile(r'[\\/:*?"<>|\s]+')


@dataclass
class ImageRef:
    """One image slot of a render target; `src` is swapped during export."""
    src: str
    alt: str = ""


class RenderTarget(Protocol):
    def images(self) -> List[ImageRef]: ...
    def repaint(self) -> None: ...
    def rasterize(self, scale: int, background: str) -> Image.Image: ...


@dataclass(frozen=True)
class ExportResult:
    data: bytes
    file_name: str
    mime: str = "image/jpeg"


def proxy_url(url: str) -> str:
    """Route sources from hosts that block canvas reads through the image proxy."""
    if not url:
        return ""
    host = (urlsplit(url).hostname or "").lower()
    if host in PROXY_HOSTS:
        return f"{PROXY_BASE}?url={quote(url, safe='')}&default={quote(url, safe='')}"
    return url


def to_data_uri(data: bytes, mime: str) -> str:
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"


def decode_data_uri(uri: str) -> Tuple[str, bytes]:
    """Return (mime, bytes) for a base64 data URI. Raises ValueError otherwise."""
    if not uri.startswith("data:") or ";base64," not in uri:
        raise ValueError("not a base64 data URI")
    header, payload = uri[5:].split(";base64,", 1)
    return header or "application/octet-stream", base64.b64decode(payload)


def export_file_name(match: MatchRecord) -> str:
    opponent = _UNSAFE_FILENAME.sub("_", match.opponent).strip("_") or "opponent"
    return f"MATCH_REPORT_{match.date}_vs_{opponent}.jpg"


class SnapshotExporter:
    def __init__(
        self,
        session: Optional[requests.Session] = None,
        scale: int = EXPORT_SCALE,
        background: str = EXPORT_BACKGROUND,
        quality: int = JPEG_QUALITY,
        repaint_delay: float = REPAINT_DELAY_SEC,
        timeout: Tuple[int, int] = (10, 20),
        page_url: str = "",
    ):
        if session is None:
            session = requests.Session()
            session.headers.update({"User-Agent": USER_AGENT})
        self.session = session
        self.scale = scale
        self.background = background
        self.quality = quality
        self.repaint_delay = repaint_delay
        self.timeout = timeout
        self.page_url = page_url

    def inline_source(self, url: str) -> str:
        """Data URI for `url`; the original url when the fetch fails."""
        if not url or url.startswith("data:"):
            return url
        try:
            absolute = urljoin(self.page_url, url) if self.page_url else url
            resp = self.session.get(proxy_url(absolute), timeout=self.timeout)
            resp.raise_for_status()
            mime = (resp.headers.get("Content-Type") or "").split(";")[0].strip()
            if not mime.startswith("image/"):
                mime = _sniff_mime(resp.content)
            return to_data_uri(resp.content, mime)
        except (requests.RequestException, OSError, ValueError):
            logger.warning("inlining image failed, keeping original source: %s", url, exc_info=True)
            return url

    def export(self, target: RenderTarget, match: MatchRecord) -> ExportResult:
        images = target.images()
        inlined = [self.inline_source(img.src) for img in images]
        originals = [img.src for img in images]
        rendered = False
        try:
            for img, src in zip(images, inlined):
                img.src = src
            target.repaint()
            if self.repaint_delay > 0:
                time.sleep(self.repaint_delay)
            raster = target.rasterize(self.scale, self.background)
            rendered = True
        except Exception as exc:
            raise ExportError(f"rendering the report failed: {exc}") from exc
        finally:
            for img, src in zip(images, originals):
                img.src = src
            try:
                target.repaint()
            except Exception as exc:
                # an earlier failure is already on its way out; keep that one
                if not rendered:
                    logger.warning("repaint after restoring sources failed", exc_info=True)
                else:
                    raise ExportError(f"restoring the report failed: {exc}") from exc

        return ExportResult(data=encode_jpeg(raster, self.background, self.quality), file_name=export_file_name(match))


def _sniff_mime(data: bytes) -> str:
    try:
        with Image.open(BytesIO(data)) as im:
            fmt = (im.format or "").lower()
    except OSError:
        return "application/octet-stream"
    return f"image/{'jpeg' if fmt == 'jpg' else fmt}" if fmt else "application/octet-stream"


def encode_jpeg(raster: Image.Image, background: str = EXPORT_BACKGROUND, quality: int = JPEG_QUALITY) -> bytes:
    try:
        if raster.mode in ("RGBA", "LA", "P"):
            rgba = raster.convert("RGBA")
            flat = Image.new("RGB", rgba.size, background)
            flat.paste(rgba, mask=rgba.split()[-1])
            raster = flat
        elif raster.mode != "RGB":
            raster = raster.convert("RGB")
        buf = BytesIO()
        raster.save(buf, format="JPEG", quality=quality)
    except (OSError, ValueError) as exc:
        raise ExportError(f"encoding the report failed: {exc}") from exc
    return buf.getvalue()
