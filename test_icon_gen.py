from datetime import date

from icon_gen import create_icon_image


def test_icon_is_64px_rgba():
    img = create_icon_image(date(2025, 1, 31))
    assert img.size == (64, 64)
    assert img.mode == "RGBA"
    # the ring is drawn in the circle-mark green
    assert img.getpixel((32, 5))[:3] == (0x22, 0xC5, 0x5E)
