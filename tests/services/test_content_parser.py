import datetime
import logging

import pytest

from repoblog.exceptions import MalformedDocument
from repoblog.schemas.blog import PostFrontMatter
from repoblog.services.content_parser import (
    EXCERPT_LENGTH,
    derive_excerpt,
    normalize_date,
    parse_document,
    serialize_document,
    to_front_matter,
)
from tests.conftest import markdown


def test_parse_document_splits_front_matter_and_body():
    raw = markdown(
        """
        ---
        title: Hello
        date: 2024-01-01
        published: true
        category: 技術
        ---

        # Hi
        World
        """
    ).encode()

    document = parse_document(raw)

    assert document.metadata == {
        "title": "Hello",
        "date": datetime.date(2024, 1, 1),
        "published": True,
        "category": "技術",
    }
    assert document.body == "# Hi\nWorld"


def test_parse_document_without_front_matter_keeps_whole_input():
    raw = "Just a body\n\nwith --- inside\n"

    document = parse_document(raw)

    assert document.metadata == {}
    assert document.body == raw


def test_parse_document_with_empty_block():
    document = parse_document("---\n---\nbody")

    assert document.metadata == {}
    assert document.body == "body"


def test_parse_document_rejects_unclosed_block():
    with pytest.raises(MalformedDocument):
        parse_document("---\ntitle: Never closed\n\nbody text")


def test_parse_document_rejects_invalid_yaml():
    with pytest.raises(MalformedDocument):
        parse_document("---\ntitle: [unterminated\n---\nbody")


def test_parse_document_rejects_non_mapping_front_matter():
    with pytest.raises(MalformedDocument):
        parse_document("---\n- a\n- b\n---\nbody")


def test_serialize_omits_none_values_and_round_trips():
    metadata = {
        "title": "Hello",
        "date": "2024-01-01",
        "published": True,
        "category": None,
        "excerpt": None,
    }

    raw = serialize_document("# Hi\nWorld", metadata)
    document = parse_document(raw)

    assert b"category" not in raw
    assert document.body == "# Hi\nWorld"
    assert document.metadata == {"title": "Hello", "date": "2024-01-01", "published": True}


def test_serialize_accepts_front_matter_model_and_keeps_unicode():
    front_matter = PostFrontMatter(title="ラーメン日記", date="2023-12-31", category="ラーメン")

    raw = serialize_document("本文", front_matter)

    assert "ラーメン日記" in raw.decode("utf-8")
    assert parse_document(raw).metadata == {
        "title": "ラーメン日記",
        "date": "2023-12-31",
        "category": "ラーメン",
    }


def test_serialize_without_metadata_is_just_the_body():
    assert serialize_document("plain", {}) == b"plain"


@pytest.mark.parametrize(
    "metadata", [{}, {"title": "Rules"}], ids=["no-metadata", "with-metadata"]
)
def test_body_starting_with_horizontal_rule_round_trips(metadata):
    body = "---\nintro\n---\ntext"

    document = parse_document(serialize_document(body, metadata))

    assert document.metadata == metadata
    assert document.body == body


def test_parse_document_rejects_invalid_utf8():
    with pytest.raises(MalformedDocument):
        parse_document(b"---\ntitle: x\n---\n\xff\xfe body")


def test_derive_excerpt_strips_markdown():
    body = markdown(
        """
        # Title

        Some **bold** and `code` with a [link](https://example.com).
        ![cover](/img/cover.png) ![[diagram.png]]
        <div class="note">Inline <br> html</div>
        ~~gone~~
        """
    )

    assert derive_excerpt(body) == (
        "Title Some bold and code with a link. Inline html gone"
    )


def test_derive_excerpt_scenario_from_heading_body():
    assert derive_excerpt("# Hi\nWorld") == "Hi World"


def test_derive_excerpt_truncates_long_text():
    body = "word " * 100

    excerpt = derive_excerpt(body)

    assert excerpt.endswith("...")
    assert len(excerpt) == EXCERPT_LENGTH + 3
    assert excerpt[:-3] == body.strip()[:EXCERPT_LENGTH]


def test_derive_excerpt_keeps_exact_length_text():
    body = "a" * EXCERPT_LENGTH

    assert derive_excerpt(body) == body


@pytest.mark.parametrize(
    "body",
    [
        "## Heading\n\n" + "*emphasis* " * 40,
        "<p>" + "html " * 50 + "</p>",
        "![img](a.png)\n" * 30 + "tail",
        "`" * 300,
    ],
)
def test_derive_excerpt_is_bounded_and_clean(body):
    excerpt = derive_excerpt(body)

    assert len(excerpt) <= EXCERPT_LENGTH + 3
    assert "<" not in excerpt
    assert "![" not in excerpt
    assert not any(marker in excerpt for marker in "#*`~")


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, ""),
        ("", ""),
        (datetime.date(2024, 2, 1), "2024-02-01"),
        (datetime.datetime(2024, 2, 1, 23, 30), "2024-02-01"),
        (
            datetime.datetime(2024, 2, 1, 23, 30, tzinfo=datetime.timezone(datetime.timedelta(hours=-5))),
            "2024-02-02",
        ),
        ("2024-02-01", "2024-02-01"),
        ("2024-02-01T10:00:00Z", "2024-02-01"),
        ("sometime", "sometime"),
    ],
)
def test_normalize_date(value, expected):
    assert normalize_date(value) == expected


def test_to_front_matter_drops_unknown_keys_and_logs(caplog):
    with caplog.at_level(logging.WARNING):
        front_matter = to_front_matter(
            {"title": 2024, "date": datetime.date(2024, 1, 1), "tags": ["x"], "draft": True}
        )

    assert front_matter == PostFrontMatter(title="2024", date="2024-01-01")
    assert any("draft, tags" in rec.message for rec in caplog.records)


def test_to_front_matter_rejects_bad_values():
    with pytest.raises(MalformedDocument):
        to_front_matter({"published": "sometimes"})
