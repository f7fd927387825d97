from __future__ import annotations

import pytest
from bs4 import BeautifulSoup

from guwen.markup import (
    ReadingAlignmentError,
    annotate,
    annotate_run,
    style_punctuation,
    tag_with_class,
)

_READINGS = {
    "天": "tiān",
    "地": "dì",
    "玄": "xuán",
    "黄": "huáng",
}


def _lookup(text: str) -> list[str]:
    return [_READINGS.get(ch, ch) for ch in text]


def _short_by_one(text: str) -> list[str]:
    return _lookup(text)[:-1]


def _soup(markup: str) -> BeautifulSoup:
    return BeautifulSoup(markup, "html.parser")


def test_annotate_run_emits_ruby_with_bracket_fallback() -> None:
    assert annotate_run("天地", _lookup) == (
        "<ruby>"
        "天<rp>(</rp><rt>tiān</rt><rp>)</rp>"
        "地<rp>(</rp><rt>dì</rt><rp>)</rp>"
        "</ruby>"
    )


def test_annotate_run_of_zero_length_is_empty() -> None:
    assert annotate_run("", _short_by_one) == ""


def test_annotate_leaves_punctuation_outside_ruby() -> None:
    markup = annotate("天，地。", _lookup)
    assert markup == annotate_run("天", _lookup) + "，" + annotate_run("地", _lookup) + "。"


def test_annotate_covers_trailing_run_without_punctuation() -> None:
    soup = _soup(annotate("天地，玄黄", _lookup))
    rubies = soup.find_all("ruby")
    assert len(rubies) == 2
    assert [rt.get_text() for rt in rubies[1].find_all("rt")] == ["xuán", "huáng"]


def test_annotation_keeps_one_reading_per_character_in_order() -> None:
    run = "天地玄黄"
    soup = _soup(annotate_run(run, _lookup))
    rts = [rt.get_text() for rt in soup.find_all("rt")]
    assert rts == ["tiān", "dì", "xuán", "huáng"]
    bases = [node for node in soup.ruby.contents if isinstance(node, str)]
    assert "".join(bases) == run


def test_reading_mismatch_raises() -> None:
    with pytest.raises(ReadingAlignmentError) as excinfo:
        annotate("天地玄黄。", _short_by_one)
    assert excinfo.value.run == "天地玄黄"
    assert len(excinfo.value.readings) == 3


def test_annotate_escapes_markup_characters() -> None:
    markup = annotate("a<b", _lookup)
    assert "&lt;" in markup
    assert "<b" not in markup


def test_style_punctuation_wraps_bare_marks() -> None:
    markup = tag_with_class("span", "line", "天，地。")
    assert style_punctuation(markup) == (
        '<span class="line">天<span class="punctuation">，</span>'
        '地<span class="punctuation">。</span></span>'
    )


def test_style_punctuation_is_idempotent() -> None:
    markup = "<main>" + annotate("天地，玄黄；天。", _lookup) + "</main>"
    once = style_punctuation(markup)
    assert style_punctuation(once) == once
    assert len(_soup(once).find_all("span", class_="punctuation")) == 3


def test_style_punctuation_ignores_attributes() -> None:
    styled = style_punctuation('<span title="天，地">天</span>')
    soup = _soup(styled)
    assert soup.find_all("span", class_="punctuation") == []
    assert soup.span["title"] == "天，地"


def test_style_punctuation_never_enters_readings() -> None:
    styled = style_punctuation(annotate("天地，玄黄。", _lookup))
    for rt in _soup(styled).find_all("rt"):
        assert rt.find("span") is None
