import logging
import re
from typing import List, Optional

from repoblog.db.github import FileContent, FileEntry
from repoblog.exceptions import InvalidSlug, NotFound
from repoblog.settings import settings

logger = logging.getLogger(__name__)

POST_SUFFIX = ".md"
SLUG_PATTERN = re.compile(r"\w[\w-]*")


def validate_slug(slug: str) -> str:
    if not slug or not SLUG_PATTERN.fullmatch(slug):
        raise InvalidSlug(f"Invalid slug: {slug!r}")
    return slug


class GitHubPostsRepo:
    """File access for posts: one Markdown file per slug."""

    def __init__(self, store, base_path: Optional[str] = None):
        self.store = store
        self.base_path = (base_path or settings.POSTS_PATH).strip("/")

    def path_for(self, slug: str) -> str:
        return f"{self.base_path}/{validate_slug(slug)}{POST_SUFFIX}"

    def list_post_files(self) -> List[FileEntry]:
        try:
            entries = self.store.list_directory(self.base_path)
        except NotFound:
            return []
        posts = []
        for entry in entries:
            if entry.type != "file" or not entry.name.endswith(POST_SUFFIX):
                continue
            if not SLUG_PATTERN.fullmatch(self.slug_from_name(entry.name)):
                logger.warning(f"Skipping post file with invalid slug: {entry.path}")
                continue
            posts.append(entry)
        return posts

    def read_post_file(self, slug: str) -> Optional[FileContent]:
        try:
            return self.store.read_file(self.path_for(slug))
        except NotFound:
            return None

    def write_post_file(
        self, slug: str, content: bytes, revision: Optional[str] = None
    ) -> str:
        action = "Update" if revision else "Create"
        return self.store.write_file(
            self.path_for(slug),
            content,
            message=f"{action} post: {slug}",
            revision=revision,
        )

    def delete_post_file(self, slug: str, revision: Optional[str]) -> None:
        self.store.delete_file(
            self.path_for(slug), revision, message=f"Delete post: {slug}"
        )

    @staticmethod
    def slug_from_name(name: str) -> str:
        return name.removesuffix(POST_SUFFIX)
