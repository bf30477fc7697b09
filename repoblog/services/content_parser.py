import datetime
import logging
import re
from typing import Any, Dict, Mapping, NamedTuple, Union

import frontmatter
import yaml
from pydantic import ValidationError

from repoblog.exceptions import MalformedDocument
from repoblog.schemas.blog import PostFrontMatter

logger = logging.getLogger(__name__)

EXCERPT_LENGTH = 140
EXCERPT_ELLIPSIS = "..."

EMPTY_FRONT_MATTER = "---\n---\n"

_HANDLER = frontmatter.YAMLHandler()

_OBSIDIAN_IMAGE_PATTERN = re.compile(r"!\[\[[^\]]*\]\]")
_IMAGE_PATTERN = re.compile(r"!\[.*?\]\(.*?\)")
_HTML_TAG_PATTERN = re.compile(r"<[^>]*>")
_MARKER_PATTERN = re.compile(r"[#*`~]")
_LINK_PATTERN = re.compile(r"\[(.*?)\]\(.*?\)")
_WHITESPACE_PATTERN = re.compile(r"\s+")


class ParsedDocument(NamedTuple):
    metadata: Dict[str, Any]
    body: str


def parse_document(raw: Union[bytes, str]) -> ParsedDocument:
    """
    Split a Markdown document into its YAML front matter and body.

    A document without a leading ``---`` block has empty metadata and the
    whole input as body. An opened block that is never closed, invalid YAML,
    or a block that is not a mapping raises MalformedDocument.
    """
    if isinstance(raw, bytes):
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedDocument(f"Document is not valid UTF-8: {e}") from e
    else:
        text = raw
    stripped = text.lstrip("\ufeff").lstrip()
    if not _HANDLER.detect(stripped):
        return ParsedDocument({}, text)

    try:
        fm_text, body = _HANDLER.split(stripped)
    except ValueError as e:
        raise MalformedDocument("Front matter block is never closed") from e

    try:
        metadata = _HANDLER.load(fm_text)
    except yaml.YAMLError as e:
        raise MalformedDocument(f"Invalid front matter: {e}") from e

    if metadata is None:
        metadata = {}
    if not isinstance(metadata, dict):
        raise MalformedDocument("Front matter must be a mapping")

    return ParsedDocument(metadata, body.strip())


def serialize_document(
    body: str, metadata: Union[Mapping[str, Any], PostFrontMatter, None] = None
) -> bytes:
    """Inverse of parse_document. Keys with a None value are not written."""
    if isinstance(metadata, PostFrontMatter):
        metadata = metadata.model_dump()
    cleaned = {k: v for k, v in (metadata or {}).items() if v is not None}
    if not cleaned:
        if _HANDLER.detect(body.lstrip("\ufeff").lstrip()):
            # A leading rule would be read back as front matter
            return (EMPTY_FRONT_MATTER + body).encode("utf-8")
        return body.encode("utf-8")
    post = frontmatter.Post(body, handler=_HANDLER, **cleaned)
    return (frontmatter.dumps(post) + "\n").encode("utf-8")


def derive_excerpt(body: str) -> str:
    """Plain-text preview of a Markdown body, cut at 140 characters."""
    text = _OBSIDIAN_IMAGE_PATTERN.sub("", body)
    text = _IMAGE_PATTERN.sub("", text)
    text = _HTML_TAG_PATTERN.sub("", text)
    text = _MARKER_PATTERN.sub("", text)
    text = _LINK_PATTERN.sub(r"\1", text)
    text = _WHITESPACE_PATTERN.sub(" ", text).strip()
    if len(text) > EXCERPT_LENGTH:
        return text[:EXCERPT_LENGTH] + EXCERPT_ELLIPSIS
    return text


def normalize_date(value) -> str:
    """Render a front matter date as YYYY-MM-DD ("" when missing)."""
    if value is None or value == "":
        return ""
    if isinstance(value, datetime.datetime):
        return _utc(value).date().isoformat()
    if isinstance(value, datetime.date):
        return value.isoformat()

    text = str(value).strip()
    try:
        parsed = datetime.datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        logger.debug(f"Leaving unrecognised date as-is: {text}")
        return text
    return _utc(parsed).date().isoformat()


def to_front_matter(metadata: Mapping[str, Any]) -> PostFrontMatter:
    """Validate loose metadata against the known post keys."""
    unknown = sorted(set(metadata) - set(PostFrontMatter.model_fields))
    if unknown:
        logger.warning(f"Ignoring unrecognised front matter keys: {', '.join(unknown)}")

    values = {
        "title": _as_text(metadata.get("title")),
        "date": normalize_date(metadata.get("date")) or None,
        "published": metadata.get("published"),
        "category": _as_text(metadata.get("category")),
        "excerpt": _as_text(metadata.get("excerpt")),
    }
    try:
        return PostFrontMatter.model_validate(values)
    except ValidationError as e:
        raise MalformedDocument(f"Invalid front matter values: {e}") from e


def _as_text(value):
    if value is None:
        return None
    return str(value)


def _utc(value: datetime.datetime) -> datetime.datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(datetime.timezone.utc)
