import json
import logging
from typing import List, Optional, Tuple

from pydantic import TypeAdapter, ValidationError

from repoblog.exceptions import MalformedDocument, NotFound
from repoblog.repos.posts_repo import SLUG_PATTERN, validate_slug
from repoblog.schemas.comments import Comment
from repoblog.settings import settings

logger = logging.getLogger(__name__)

COMMENTS_SUFFIX = ".json"
_comment_list = TypeAdapter(List[Comment])


class GitHubCommentsRepo:
    """One pretty-printed JSON array of comments per post slug."""

    def __init__(self, store, base_path: Optional[str] = None):
        self.store = store
        self.base_path = (base_path or settings.COMMENTS_PATH).strip("/")

    def path_for(self, slug: str) -> str:
        return f"{self.base_path}/{validate_slug(slug)}{COMMENTS_SUFFIX}"

    def list_comment_slugs(self) -> List[str]:
        try:
            entries = self.store.list_directory(self.base_path)
        except NotFound:
            return []
        slugs = []
        for entry in entries:
            if entry.type != "file" or not entry.name.endswith(COMMENTS_SUFFIX):
                continue
            slug = entry.name.removesuffix(COMMENTS_SUFFIX)
            if not SLUG_PATTERN.fullmatch(slug):
                logger.warning(f"Skipping comments file with invalid slug: {entry.path}")
                continue
            slugs.append(slug)
        return slugs

    def read_comments(self, slug: str) -> Tuple[List[Comment], Optional[str]]:
        """Return the stored comments and the collection's revision (None if absent)."""
        try:
            file = self.store.read_file(self.path_for(slug))
        except NotFound:
            return [], None
        return decode_comments(file.content, slug), file.revision

    def write_comments(
        self, slug: str, comments: List[Comment], revision: Optional[str] = None
    ) -> str:
        return self.store.write_file(
            self.path_for(slug),
            encode_comments(comments),
            message=f"Update comments for: {slug}",
            revision=revision,
        )


def encode_comments(comments: List[Comment]) -> bytes:
    payload = [comment.model_dump(exclude_none=True) for comment in comments]
    return json.dumps(payload, indent=2, ensure_ascii=False).encode("utf-8")


def decode_comments(raw: bytes, slug: str = "") -> List[Comment]:
    if not raw.strip():
        return []
    try:
        return _comment_list.validate_json(raw)
    except ValidationError as e:
        logger.error(f"Invalid comments file for {slug}: {e}")
        raise MalformedDocument(f"Invalid comments file for {slug}") from e
