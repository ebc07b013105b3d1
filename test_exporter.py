import base64
from datetime import date

import pytest
from PIL import Image

import exporter
from exporter import (
    ExportError,
    decode_payload,
    encode_payload,
    export_filename,
    export_month,
    export_png,
    rasterize,
)
from marks import MarkState
from render import Drawing, Rect, render_month
from state import CalendarState


@pytest.fixture
def state():
    state = CalendarState(date(2025, 1, 15))
    state.apply_holidays(2025, {"2025-01-01": "元日"})
    state.toggle_mark(date(2025, 1, 1))
    for _ in range(2):
        state.toggle_mark(date(2025, 1, 2))
    state.set_reason(date(2025, 1, 2), MarkState.CROSS, "closed")
    return state


@pytest.fixture
def drawing(state):
    return render_month(state, today=date(2025, 1, 15))


def _payload(svg):
    return "data:image/svg+xml;base64," + base64.b64encode(svg.encode()).decode()


def _near(rgb, target, tol=40):
    return all(abs(a - b) <= tol for a, b in zip(rgb, target))


def test_export_filename():
    assert export_filename(2025, 1) == "calendar-2025-01.png"
    assert export_filename(2030, 12) == "calendar-2030-12.png"


def test_payload_decodes_to_full_size_surface(drawing):
    payload = encode_payload(drawing)
    assert payload.startswith("data:image/svg+xml;base64,")
    assert decode_payload(payload).size == (1000, 800)


def test_decode_handles_groups_and_relative_paths():
    svg = ('<svg width="1000" height="800" xmlns="http://www.w3.org/2000/svg">'
           '<g><rect x="0" y="0" width="1000" height="800" fill="#eff6ff"/></g>'
           '<path d="m10,10 l5,5" stroke="black"/></svg>')
    surface = decode_payload(_payload(svg))
    assert surface.size == (1000, 800)
    assert _near(rasterize(surface).getpixel((500, 400)), (0xEF, 0xF6, 0xFF), tol=2)


def test_decode_scales_other_sizes_to_the_export_surface():
    svg = '<svg width="100" height="80" xmlns="http://www.w3.org/2000/svg"></svg>'
    assert decode_payload(_payload(svg)).size == (1000, 800)


@pytest.mark.parametrize("payload", [
    "data:image/png;base64,AAAA",
    "data:image/svg+xml;base64,!!!",
    _payload("<svg"),
])
def test_decode_rejects_garbage(payload):
    with pytest.raises(Exception):
        decode_payload(payload)


def test_rasterize_paints_background_and_marks(drawing):
    img = rasterize(decode_payload(encode_payload(drawing)))
    assert img.size == (1000, 800)
    assert img.mode == "RGB"
    # Sunday cell background, clear of the date number
    assert _near(img.getpixel((20, 100)), (0xFE, 0xF2, 0xF2), tol=2)
    # Circle mark on Jan 1 (cell centre x=355, glyph centre y=135)
    region = img.crop((343, 123, 368, 148))
    assert any(_near(c, (0x22, 0xC5, 0x5E)) for _n, c in region.getcolors(4096))


def test_export_writes_png(drawing, tmp_path):
    target = tmp_path / export_filename(2025, 1)
    assert export_png(drawing, target) == target
    with Image.open(target) as img:
        assert img.format == "PNG"
        assert img.size == (1000, 800)
    assert sorted(p.name for p in tmp_path.iterdir()) == ["calendar-2025-01.png"]


def test_export_survives_control_characters_in_reasons(state, tmp_path):
    state.set_reason(date(2025, 1, 2), MarkState.CROSS, "line\x0bbreak")
    target = tmp_path / "calendar-2025-01.png"
    export_png(render_month(state), target)
    assert target.exists()


def test_export_into_missing_directory_fails_cleanly(drawing, tmp_path):
    target = tmp_path / "missing" / "calendar-2025-01.png"
    with pytest.raises(ExportError):
        export_png(drawing, target)
    assert not target.exists()


def test_decode_failure_leaves_no_file(drawing, tmp_path, monkeypatch):
    monkeypatch.setattr(exporter, "encode_payload", lambda _d: "not a payload")
    target = tmp_path / "calendar-2025-01.png"
    with pytest.raises(ExportError) as info:
        export_png(drawing, target)
    assert isinstance(info.value.__cause__, ValueError)
    assert list(tmp_path.iterdir()) == []


def test_failed_export_keeps_previous_file(tmp_path, monkeypatch):
    target = tmp_path / "calendar-2025-01.png"
    target.write_bytes(b"old")
    monkeypatch.setattr(exporter, "encode_png", lambda _img: 1 / 0)
    with pytest.raises(ExportError):
        export_png(Drawing(elements=[Rect(0, 0, 1000, 800)]), target)
    assert target.read_bytes() == b"old"
    assert [p.name for p in tmp_path.iterdir()] == ["calendar-2025-01.png"]


def test_export_month_alerts_once_and_keeps_state(state, tmp_path, caplog):
    before = (state.reference, state.holidays.copy(),
              [(k, state.marks.list_by_kind(k)) for k in (MarkState.CROSS, MarkState.TRIANGLE)],
              state.marks.mark_of(date(2025, 1, 1)))
    alerts = []
    target = tmp_path / "missing" / "calendar-2025-01.png"

    with caplog.at_level("ERROR", logger="exporter"):
        assert export_month(state, target, alerts.append) is None

    assert alerts == ["Export failed."]
    assert "2025-01" in caplog.text
    after = (state.reference, state.holidays,
             [(k, state.marks.list_by_kind(k)) for k in (MarkState.CROSS, MarkState.TRIANGLE)],
             state.marks.mark_of(date(2025, 1, 1)))
    assert after == before


def test_export_month_success_does_not_alert(state, tmp_path):
    alerts = []
    target = tmp_path / "calendar-2025-01.png"
    assert export_month(state, target, alerts.append) == target
    assert alerts == []
    assert target.exists()
