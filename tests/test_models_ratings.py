from __future__ import annotations

import pytest

from wikiapi import (
    PageRecord,
    ResponseDecodeError,
    decode_pages,
    decode_users,
    extract_rating,
)


def test_extract_rating_reads_class_parameter() -> None:
    assert extract_rating("{{WikiProject Food|class=GA|importance=low}}") == "ga"
    assert extract_rating("{{WikiProject Food | class = Start }}") == "start"


def test_extract_rating_is_none_without_class() -> None:
    assert extract_rating("{{WikiProject Food}}") is None
    assert extract_rating("") is None
    assert extract_rating(None) is None


def test_extract_rating_skips_empty_classes_and_comments() -> None:
    wikitext = """
{{WikiProject banner shell|class=<!-- B -->|
{{WikiProject Food|class=|importance=mid}}
{{WikiProject Plants|class=C}}
}}
"""
    assert extract_rating(wikitext) == "c"


def test_extract_rating_normalizes_aliases() -> None:
    assert extract_rating("{{WP Disambiguation|class=Disambiguation}}") == "disambig"
    assert extract_rating("{{WikiProject Music|class=FeaturedList}}") == "fl"


def test_decode_pages_reads_flags_and_revisions() -> None:
    pages = decode_pages(
        {
            "pages": {
                "-1": {"ns": 1, "title": "Talk:Apple", "missing": ""},
                "12": {
                    "pageid": 12,
                    "ns": 0,
                    "title": "Selfies",
                    "redirect": "",
                    "revisions": [
                        {"contentmodel": "wikitext", "*": "#REDIRECT [[Selfie]]"}
                    ],
                },
            }
        }
    )

    by_title = {page.title: page for page in pages}
    assert by_title["Talk:Apple"].missing is True
    assert by_title["Talk:Apple"].content is None
    assert by_title["Selfies"].redirect is True
    assert by_title["Selfies"].content == "#REDIRECT [[Selfie]]"
    assert by_title["Selfies"].revisions[0].content_model == "wikitext"


def test_decode_pages_accepts_formatversion_2_booleans() -> None:
    record = PageRecord.from_payload(
        "7",
        {
            "title": "Selfie",
            "redirect": False,
            "missing": False,
            "revisions": [{"content": "text"}],
        },
    )

    assert record.redirect is False
    assert record.missing is False
    assert record.content == "text"


def test_decode_pages_without_pages_section_is_empty() -> None:
    assert decode_pages({"normalized": []}) == []
    assert decode_pages(None) == []


def test_page_record_requires_title() -> None:
    with pytest.raises(ResponseDecodeError):
        PageRecord.from_payload("1", {"ns": 0})
    with pytest.raises(ResponseDecodeError):
        PageRecord.from_payload("1", ["not", "a", "page"])  # type: ignore[arg-type]


def test_decode_users() -> None:
    users = decode_users(
        {
            "users": [
                {"userid": "24", "name": "Jimbo Wales"},
                {"name": "Ghost", "missing": ""},
            ]
        }
    )

    assert [(user.name, user.user_id, user.missing) for user in users] == [
        ("Jimbo Wales", 24, False),
        ("Ghost", None, True),
    ]
    assert decode_users({}) == []
