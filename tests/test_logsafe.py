from __future__ import annotations

from spatialtrack._logsafe import clip_for_log, preview_text


def test_preview_text_bounds_length() -> None:
    assert preview_text("short") == "short"
    assert preview_text("x" * 100) == "x" * 100
    assert preview_text("x" * 101) == "x" * 100 + "..."
    assert preview_text("abcdef", 3) == "abc..."


def test_clip_for_log_truncates_long_strings() -> None:
    clipped = clip_for_log({"status": "x" * 600}, max_string=10)
    assert clipped["status"].startswith("x" * 10)
    assert "<truncated>" in clipped["status"]


def test_clip_for_log_limits_items() -> None:
    clipped = clip_for_log({"characters": list(range(60))}, max_items=5)
    assert clipped["characters"] == [0, 1, 2, 3, 4, "<55 more>"]


def test_clip_for_log_passes_scalars() -> None:
    assert clip_for_log({"x": 1.5, "ok": True, "none": None}) == {"x": 1.5, "ok": True, "none": None}
