import datetime
import logging
from typing import Callable, Iterable, List, Optional

from repoblog.exceptions import CommentNotFound, Conflict, InvalidComments
from repoblog.schemas.comments import Comment, CommentInput, CommentThread
from repoblog.settings import settings

logger = logging.getLogger(__name__)

_EPOCH = datetime.datetime.min.replace(tzinfo=datetime.timezone.utc)


class CommentsService:
    def __init__(self, repo, max_attempts: Optional[int] = None, clock=None):
        self.repo = repo
        self.max_attempts = max(1, max_attempts or settings.COMMENT_WRITE_ATTEMPTS)
        self.clock = clock or _utcnow

    def list_for_post(self, slug: str) -> List[Comment]:
        comments, _revision = self.repo.read_comments(slug)
        return comments

    def get_thread(self, slug: str) -> CommentThread:
        comments, revision = self.repo.read_comments(slug)
        return CommentThread(slug=slug, comments=comments, revision=revision)

    def append(self, slug: str, data: CommentInput) -> Comment:
        """Add a new unread comment to the post's collection."""
        created = {}

        def add(comments: List[Comment]) -> List[Comment]:
            comment = self._new_comment(slug, data, comments)
            created["comment"] = comment
            return [*comments, comment]

        self._update(slug, add)
        logger.info(f"Added comment {created['comment'].id} to {slug}")
        return created["comment"]

    def replace_all(
        self, slug: str, comments: List[Comment], revision: Optional[str] = None
    ) -> str:
        """
        Overwrite the whole collection. Without a revision the current one is
        read first, so the write only guards against changes in between.
        """
        check_collection(slug, comments)
        if revision is None:
            _current, revision = self.repo.read_comments(slug)
        return self.repo.write_comments(slug, comments, revision)

    def mark_read(self, slug: str, comment_id: str) -> Comment:
        return self._update_one(slug, comment_id, isRead=True)

    def reply(self, slug: str, comment_id: str, text: str) -> Comment:
        return self._update_one(slug, comment_id, reply=text, isRead=True)

    def list_all(self) -> List[Comment]:
        """Every comment of every post, newest first."""
        all_comments: List[Comment] = []
        for slug in self.repo.list_comment_slugs():
            all_comments.extend(self.list_for_post(slug))
        return sorted(all_comments, key=lambda c: parse_timestamp(c.date), reverse=True)

    def _update_one(self, slug: str, comment_id: str, **changes) -> Comment:
        updated = {}

        def apply(comments: List[Comment]) -> List[Comment]:
            result = []
            for comment in comments:
                if comment.id == comment_id:
                    comment = comment.model_copy(update=changes)
                    updated["comment"] = comment
                result.append(comment)
            if "comment" not in updated:
                raise CommentNotFound(slug, comment_id)
            return result

        self._update(slug, apply)
        return updated["comment"]

    def _update(self, slug: str, change: Callable[[List[Comment]], List[Comment]]) -> str:
        """Read-modify-write the collection, retrying when the revision moved."""
        for attempt in range(1, self.max_attempts + 1):
            comments, revision = self.repo.read_comments(slug)
            try:
                return self.repo.write_comments(slug, change(comments), revision)
            except Conflict:
                if attempt == self.max_attempts:
                    logger.error(f"Giving up on comments for {slug} after {attempt} conflicts")
                    raise
                logger.warning(f"Comments for {slug} changed concurrently, retrying ({attempt})")

    def _new_comment(self, slug: str, data: CommentInput, existing: Iterable[Comment]) -> Comment:
        now = self.clock()
        return Comment(
            id=new_comment_id(now, (c.id for c in existing)),
            postSlug=slug,
            author=data.author,
            content=data.content,
            date=format_timestamp(now),
            isRead=False,
        )


def check_collection(slug: str, comments: Iterable[Comment]) -> None:
    """Ids must be unique and every comment must belong to slug."""
    seen = set()
    for comment in comments:
        if comment.postSlug != slug:
            raise InvalidComments(f"Comment {comment.id} belongs to {comment.postSlug}, not {slug}")
        if comment.id in seen:
            raise InvalidComments(f"Duplicate comment id {comment.id} for {slug}")
        seen.add(comment.id)


def new_comment_id(now: datetime.datetime, taken: Iterable[str]) -> str:
    """Millisecond timestamp, bumped until unique within the collection."""
    taken = set(taken)
    candidate = int(now.timestamp() * 1000)
    while str(candidate) in taken:
        candidate += 1
    return str(candidate)


def format_timestamp(value: datetime.datetime) -> str:
    value = value.astimezone(datetime.timezone.utc)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: str) -> datetime.datetime:
    try:
        parsed = datetime.datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        return _EPOCH
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=datetime.timezone.utc)
    return parsed


def unread_count(comments: Iterable[Comment]) -> int:
    return sum(1 for comment in comments if not comment.isRead)


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)
