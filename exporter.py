"""Rasterize a month drawing and write it out as a PNG file.

The drawing goes through the same stages a browser would take it through:
serialize to an SVG data payload, decode that payload into a 1000×800
image surface with cairosvg, paint the surface onto a Pillow canvas and
encode the canvas as PNG.  Any stage failing raises a single
:class:`ExportError`; the destination file is only ever replaced by a
complete image.
"""

from __future__ import annotations

import base64
import io
import logging
import os
import tempfile
from pathlib import Path
from typing import Callable

import cairosvg
from PIL import Image

from render import CANVAS_HEIGHT, CANVAS_WIDTH, Drawing, render_month

logger = logging.getLogger(__name__)

PAYLOAD_PREFIX = "data:image/svg+xml;base64,"


class ExportError(Exception):
    """The month could not be exported; nothing was written."""


def export_filename(year: int, month: int) -> str:
    return f"calendar-{year}-{month:02d}.png"


# ------------------------------------------------------------------
# Stage 1: drawing -> payload
# ------------------------------------------------------------------
def encode_payload(drawing: Drawing) -> str:
    svg = drawing.to_svg().encode("utf-8")
    return PAYLOAD_PREFIX + base64.b64encode(svg).decode("ascii")


# ------------------------------------------------------------------
# Stage 2: payload -> image surface
# ------------------------------------------------------------------
def decode_payload(payload: str) -> Image.Image:
    """Decode an SVG data payload into a 1000×800 image surface."""
    if not payload.startswith(PAYLOAD_PREFIX):
        raise ValueError("not an SVG data payload")
    svg = base64.b64decode(payload[len(PAYLOAD_PREFIX):], validate=True)
    png = cairosvg.svg2png(
        bytestring=svg, output_width=CANVAS_WIDTH, output_height=CANVAS_HEIGHT,
    )
    surface = Image.open(io.BytesIO(png))
    surface.load()
    if surface.size != (CANVAS_WIDTH, CANVAS_HEIGHT):
        raise ValueError(
            f"surface must be {CANVAS_WIDTH}x{CANVAS_HEIGHT}, got {surface.width}x{surface.height}"
        )
    return surface


# ------------------------------------------------------------------
# Stage 3: surface -> canvas
# ------------------------------------------------------------------
def rasterize(surface: Image.Image) -> Image.Image:
    """Paint *surface* onto an opaque white canvas of the same size."""
    canvas = Image.new("RGB", surface.size, "white")
    rgba = surface.convert("RGBA")
    canvas.paste(rgba, (0, 0), rgba)
    return canvas


# ------------------------------------------------------------------
# Stage 4: canvas -> file
# ------------------------------------------------------------------
def encode_png(image: Image.Image) -> bytes:
    buf = io.BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue()


def _write_atomic(destination: Path, data: bytes) -> None:
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{destination.name}.", suffix=".tmp", dir=destination.parent,
    )
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp_name, destination)
    except OSError:
        os.unlink(tmp_name)
        raise


def export_png(drawing: Drawing, destination) -> Path:
    """Run the whole pipeline and write *drawing* to *destination* as PNG."""
    destination = Path(destination)
    try:
        payload = encode_payload(drawing)
        surface = decode_payload(payload)
        canvas = rasterize(surface)
        data = encode_png(canvas)
        _write_atomic(destination, data)
    except Exception as exc:
        raise ExportError(f"Could not export {destination.name}: {exc}") from exc
    logger.info("Exported %s (%d bytes)", destination, len(data))
    return destination


def export_month(state, destination, alert: Callable[[str], None]) -> Path | None:
    """Export the month shown by *state*; report a failure once through *alert*.

    Only reads from *state*, so a failed export leaves the calendar as it was.
    """
    try:
        return export_png(render_month(state), destination)
    except ExportError:
        logger.exception("Export of %s-%02d failed", state.year, state.month)
        alert("Export failed.")
        return None
