from collections import Counter
from typing import Iterable, List, Optional, Sequence

from repoblog.schemas.blog import (
    ArchiveBucket,
    CategoryCount,
    PostMeta,
    PostNavigation,
    Sidebar,
)

ARCHIVE_KEY_LENGTH = len("YYYY-MM")
RECENT_POSTS_LIMIT = 5


def published_only(posts: Iterable[PostMeta]) -> List[PostMeta]:
    return [post for post in posts if post.published]


def filter_by_category(posts: Iterable[PostMeta], category: str) -> List[PostMeta]:
    return [post for post in posts if post.category == category]


def filter_by_archive(posts: Iterable[PostMeta], key: str) -> List[PostMeta]:
    return [post for post in posts if post.date and post.date.startswith(key)]


def recent_posts(posts: Iterable[PostMeta], limit: int = RECENT_POSTS_LIMIT) -> List[PostMeta]:
    return published_only(posts)[:limit]


def build_sidebar(posts: Sequence[PostMeta], preferred_order: Sequence[str] = ()) -> Sidebar:
    """Everything the blog sidebar shows, computed from one listing."""
    return Sidebar(
        total=len(published_only(posts)),
        recent=recent_posts(posts),
        categories=group_categories(posts, preferred_order),
        archives=archive_buckets(posts),
    )


def group_categories(
    posts: Iterable[PostMeta], preferred_order: Sequence[str] = ()
) -> List[CategoryCount]:
    """
    Published-post counts per category. Categories from preferred_order come
    first in that order; the rest follow alphabetically.
    """
    counts = Counter(post.category for post in published_only(posts) if post.category)
    ordered = [name for name in preferred_order if name in counts]
    ordered += sorted(name for name in counts if name not in preferred_order)
    return [CategoryCount(name=name, count=counts[name]) for name in ordered]


def archive_buckets(posts: Iterable[PostMeta]) -> List[ArchiveBucket]:
    """Published-post counts per YYYY-MM, most recent month first."""
    counts = Counter(
        post.date[:ARCHIVE_KEY_LENGTH] for post in published_only(posts) if post.date
    )
    return [
        ArchiveBucket(key=key, label=format_archive_label(key), count=counts[key])
        for key in sorted(counts, reverse=True)
    ]


def adjacent_posts(posts: Sequence[PostMeta], slug: str) -> PostNavigation:
    """Neighbours of slug in a newest-first list: index-1 is newer, index+1 older."""
    index = _index_of(posts, slug)
    if index is None:
        return PostNavigation()
    return PostNavigation(
        newer=posts[index - 1] if index > 0 else None,
        older=posts[index + 1] if index + 1 < len(posts) else None,
    )


def format_archive_label(key: str) -> str:
    try:
        year, month = (int(part) for part in key.split("-", 1))
    except ValueError:
        return key
    if not 1 <= month <= 12:
        return key
    return f"{year}年{month}月"


def _index_of(posts: Sequence[PostMeta], slug: str) -> Optional[int]:
    for index, post in enumerate(posts):
        if post.slug == slug:
            return index
    return None
