from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

from guwen.page_io import PageIOError
from guwen.reading import (
    ReadingBackend,
    ReadingBackendUnavailableError,
    ReadingOverrides,
    load_reading_overrides,
    parse_reading_overrides,
)


def test_parse_overrides_splits_space_separated_readings() -> None:
    overrides = parse_reading_overrides({"不亦说乎": "bù yì yuè hū", "朋": ["péng"]})
    assert overrides.entries["不亦说乎"] == ("bù", "yì", "yuè", "hū")
    assert overrides.entries["朋"] == ("péng",)
    assert len(overrides) == 2


def test_parse_overrides_rejects_misaligned_reading() -> None:
    with pytest.raises(ValueError, match="说乎"):
        parse_reading_overrides({"说乎": "yuè"})


def test_parse_overrides_rejects_non_object() -> None:
    with pytest.raises(ValueError):
        parse_reading_overrides(["说", "yuè"])


def test_overrides_are_read_only() -> None:
    overrides = ReadingOverrides({"说": ("yuè",)})
    with pytest.raises(TypeError):
        overrides.entries["说"] = ("shuō",)  # type: ignore[index]


def test_override_spans_prefer_longest_match() -> None:
    overrides = ReadingOverrides({"天": ("a",), "天道": ("b", "c")})
    assert overrides.spans("天道天") == [(0, 2, ("b", "c")), (2, 3, ("a",))]
    assert ReadingOverrides().spans("天道") == []


def test_load_overrides_from_json(tmp_path: Path) -> None:
    path = tmp_path / "custom_pinyin.json"
    path.write_text(json.dumps({"说": "yuè"}, ensure_ascii=False), encoding="utf-8")
    overrides = load_reading_overrides(path)
    assert dict(overrides.entries) == {"说": ("yuè",)}


def test_load_missing_overrides(tmp_path: Path) -> None:
    path = tmp_path / "missing.json"
    with pytest.raises(PageIOError):
        load_reading_overrides(path)
    assert len(load_reading_overrides(path, required=False)) == 0


def test_load_invalid_json_overrides(tmp_path: Path) -> None:
    path = tmp_path / "custom_pinyin.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ValueError, match="Failed to parse"):
        load_reading_overrides(path)


def test_backend_returns_one_reading_per_character() -> None:
    pytest.importorskip("pypinyin")
    backend = ReadingBackend()
    assert backend.readings("天道") == ["tiān", "dào"]
    mixed = backend.readings("天a，")
    assert len(mixed) == 3
    assert mixed[1:] == ["a", "，"]
    assert backend.readings("") == []


def test_backend_applies_overrides_before_default_readings() -> None:
    pytest.importorskip("pypinyin")
    overrides = ReadingOverrides({"天道": ("x1", "x2")})
    backend = ReadingBackend(overrides)
    readings = backend("天道酬勤")
    assert readings[:2] == ["x1", "x2"]
    assert len(readings) == 4


def test_backend_styles() -> None:
    pytest.importorskip("pypinyin")
    assert ReadingBackend(style="tone3").readings("天") == ["tian1"]
    assert ReadingBackend(style="normal").readings("天") == ["tian"]
    with pytest.raises(ValueError):
        ReadingBackend(style="bopomofo")


def test_backend_reading_text_joins_syllables() -> None:
    pytest.importorskip("pypinyin")
    assert ReadingBackend().to_reading_text("天地") == "tiān dì"


def test_backend_reports_missing_pypinyin(monkeypatch) -> None:
    monkeypatch.setitem(sys.modules, "pypinyin", None)
    with pytest.raises(ReadingBackendUnavailableError, match="pypinyin"):
        ReadingBackend()


def test_overrides_hash_by_identity_and_hide_pattern() -> None:
    first = ReadingOverrides({"说": ("yuè",)})
    second = ReadingOverrides({"说": ("yuè",)})
    assert {first: 1}[first] == 1
    assert first != second
    assert "pattern" not in repr(first)
    assert first.pattern is not None
    assert ReadingOverrides().pattern is None
