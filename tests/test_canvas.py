from __future__ import annotations

import pytest

from contract_signer.pipeline.canvas import CanvasError, PdfCanvas


def test_wrap_keeps_double_space_after_label() -> None:
    canv = PdfCanvas()
    assert canv._wrap("1.1  Short clause", 400, 25) == ["1.1  Short clause"]


def test_wrap_breaks_long_paragraph_within_width() -> None:
    canv = PdfCanvas()
    canv.set_font("Helvetica", 11)
    lines = canv._wrap("lorem ipsum " * 40, 200, 25)
    assert len(lines) > 1
    assert canv.string_width(lines[0]) <= 175
    assert all(canv.string_width(line) <= 200 for line in lines[1:])


def test_text_advances_cursor_per_line() -> None:
    canv = PdfCanvas()
    canv.set_font("Helvetica", 10)
    start = canv.cursor.y
    canv.text("one\ntwo", line_gap=2)
    assert canv.cursor.y == pytest.approx(start + 2 * (canv.line_height() + 2))


def test_text_with_position_keeps_x() -> None:
    canv = PdfCanvas()
    canv.text("label", 100, 300, width=200)
    assert canv.cursor.x == 100
    assert canv.cursor.y > 300


def test_unknown_alignment_rejected() -> None:
    with pytest.raises(ValueError):
        PdfCanvas().text("x", align="middle")


def test_end_emits_data_then_end() -> None:
    canv = PdfCanvas()
    events = []
    canv.on("data", lambda chunk: events.append(("data", chunk)))
    canv.on("end", lambda: events.append(("end", None)))
    canv.text("hello")
    canv.end()
    assert events[-1] == ("end", None)
    payload = b"".join(chunk for kind, chunk in events if kind == "data")
    assert payload.startswith(b"%PDF")


def test_second_end_reports_error() -> None:
    canv = PdfCanvas()
    errors = []
    canv.on("error", errors.append)
    canv.end()
    canv.end()
    assert len(errors) == 1
    assert isinstance(errors[0], CanvasError)


def test_line_to_without_move_to_fails() -> None:
    with pytest.raises(CanvasError):
        PdfCanvas().line_to(10, 10)


@pytest.mark.parametrize(
    "font, expected",
    [("Helvetica", 23.12), ("Helvetica-Bold", 23.8), ("Helvetica-Oblique", 23.12)],
)
def test_line_height_uses_font_bbox(font: str, expected: float) -> None:
    canv = PdfCanvas()
    canv.set_font(font, 20)
    assert canv.line_height() == pytest.approx(expected)


def test_wrap_breaks_word_longer_than_line() -> None:
    canv = PdfCanvas()
    canv.set_font("Helvetica", 11)
    lines = canv._wrap("Email: " + "x" * 200 + "@example.com trailing", 300, 25)
    assert len(lines) > 2
    assert canv.string_width(lines[0]) <= 275
    assert all(canv.string_width(line) <= 300 for line in lines[1:])
    assert "".join(lines).replace(" ", "") == ("Email:" + "x" * 200 + "@example.comtrailing")


def test_empty_text_draws_nothing() -> None:
    canv = PdfCanvas()
    start = canv.cursor.y
    canv.text("")
    assert canv.cursor.y == start
    canv.text("", 90, 200)
    assert (canv.cursor.x, canv.cursor.y) == (90, 200)
