"""Generate the system-tray icon (64×64 PIL Image, in-memory)."""

from datetime import date

from PIL import Image, ImageDraw, ImageFont

from render import CIRCLE_STROKE


def create_icon_image(today: date | None = None) -> Image.Image:
    """Return a 64×64 RGBA image: today's day number inside a green circle mark."""
    size = 64
    img = Image.new("RGBA", (size, size), "white")
    draw = ImageDraw.Draw(img)
    draw.ellipse((3, 3, size - 4, size - 4), outline=CIRCLE_STROKE, width=5)

    label = str((today or date.today()).day)

    # Find the largest font size that fits inside the ring
    inner = 40
    font_size = 48
    font = None
    while font_size > 10:
        try:
            font = ImageFont.truetype("DejaVuSans-Bold.ttf", font_size)
        except OSError:
            font = ImageFont.load_default(font_size)
        bbox = draw.textbbox((0, 0), label, font=font)
        if bbox[2] - bbox[0] <= inner and bbox[3] - bbox[1] <= inner:
            break
        font_size -= 2

    # Centre the actual visible pixels (compensate for font metric offsets)
    bbox = draw.textbbox((0, 0), label, font=font)
    x = (size - (bbox[2] - bbox[0])) / 2 - bbox[0]
    y = (size - (bbox[3] - bbox[1])) / 2 - bbox[1]
    draw.text((x, y), label, fill="black", font=font)

    return img
