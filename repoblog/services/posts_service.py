import logging
from typing import Any, List, Mapping, Optional, Union

from repoblog.exceptions import RevisionRequired
from repoblog.schemas.blog import (
    Post,
    PostFrontMatter,
    PostInput,
    PostMeta,
    SaveResult,
)
from repoblog.services.content_parser import (
    derive_excerpt,
    parse_document,
    serialize_document,
    to_front_matter,
)

logger = logging.getLogger(__name__)


class PostsService:
    def __init__(self, repo):
        self.repo = repo

    def list_posts(self) -> List[PostMeta]:
        """All posts, newest first. Ties keep directory order."""
        posts = []
        for entry in self.repo.list_post_files():
            slug = self.repo.slug_from_name(entry.name)
            file = self.repo.read_post_file(slug)
            if file is None:
                logger.warning(f"Post {slug} disappeared while listing")
                continue
            posts.append(parse_post_meta(slug, file.content, file.revision))

        # sorted() is stable, so equal dates stay in directory order
        return sorted(posts, key=lambda p: p.date, reverse=True)

    def get_post(self, slug: str) -> Optional[Post]:
        file = self.repo.read_post_file(slug)
        if file is None:
            return None
        return parse_post(slug, file.content, file.revision)

    def create_post(self, slug: str, data: PostInput) -> SaveResult:
        return self.save_post(slug, data.content, data.front_matter())

    def update_post(self, slug: str, data: PostInput, revision: str) -> SaveResult:
        if not revision:
            raise RevisionRequired(f"Updating post {slug} requires a revision")
        return self.save_post(slug, data.content, data.front_matter(), revision)

    def save_post(
        self,
        slug: str,
        body: str,
        metadata: Union[PostFrontMatter, Mapping[str, Any], None] = None,
        revision: Optional[str] = None,
    ) -> SaveResult:
        """
        Write a post file and return its new revision.
        Without a revision the post must not exist yet.
        """
        if not isinstance(metadata, PostFrontMatter):
            metadata = to_front_matter(metadata or {})
        content = serialize_document(body, metadata)
        new_revision = self.repo.write_post_file(slug, content, revision)
        logger.info(f"Saved post {slug} at revision {new_revision}")
        return SaveResult(slug=slug, revision=new_revision)

    def delete_post(self, slug: str, revision: Optional[str]) -> None:
        self.repo.delete_post_file(slug, revision)
        logger.info(f"Deleted post {slug}")


def parse_post_meta(slug: str, raw: bytes, revision: Optional[str] = None) -> PostMeta:
    """Listing projection of a post file; the excerpt is always filled in."""
    front_matter, body = _load(raw)
    return PostMeta(
        **_meta_fields(slug, front_matter, revision),
        excerpt=front_matter.excerpt or derive_excerpt(body),
    )


def parse_post(slug: str, raw: bytes, revision: Optional[str] = None) -> Post:
    front_matter, body = _load(raw)
    return Post(
        **_meta_fields(slug, front_matter, revision),
        excerpt=front_matter.excerpt,
        content=body,
    )


def _load(raw: bytes):
    document = parse_document(raw)
    return to_front_matter(document.metadata), document.body


def _meta_fields(slug: str, front_matter: PostFrontMatter, revision: Optional[str]) -> dict:
    return {
        "slug": slug,
        "title": front_matter.title or slug,
        "date": front_matter.date or "",
        "published": bool(front_matter.published),
        "category": front_matter.category or None,
        "revision": revision,
    }
