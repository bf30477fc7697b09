class StoreError(Exception):
    """Base class for failures reported by the remote file store."""

    def __init__(self, message: str = "", path: str | None = None):
        super().__init__(message or path or self.__class__.__name__)
        self.path = path


class NotFound(StoreError):
    pass


class Conflict(StoreError):
    """The presented revision does not match the file's current revision."""


class Unauthorized(StoreError):
    pass


class Unavailable(StoreError):
    """Network failure, timeout or a 5xx answer from the store."""


class RevisionRequired(StoreError):
    pass


class InvalidSlug(ValueError):
    pass


class MalformedDocument(ValueError):
    pass


class CommentNotFound(LookupError):
    def __init__(self, slug: str, comment_id: str):
        super().__init__(f"Comment {comment_id} not found for post {slug}")
        self.slug = slug
        self.comment_id = comment_id


class InvalidComments(ValueError):
    pass
