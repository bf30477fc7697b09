from fastapi import HTTPException

from repoblog.exceptions import (
    CommentNotFound,
    Conflict,
    InvalidComments,
    InvalidSlug,
    NotFound,
    RevisionRequired,
    Unavailable,
)


def http_error_for(exc: Exception) -> HTTPException | None:
    """Map domain errors the caller can act on to HTTP errors."""
    if isinstance(exc, Conflict):
        return HTTPException(
            status_code=409,
            detail="The content was changed by someone else. Reload and retry.",
        )
    if isinstance(exc, (RevisionRequired, InvalidSlug, InvalidComments)):
        return HTTPException(status_code=400, detail=str(exc))
    if isinstance(exc, CommentNotFound):
        return HTTPException(status_code=404, detail="Comment not found")
    if isinstance(exc, NotFound):
        return HTTPException(status_code=404, detail="Not found")
    if isinstance(exc, Unavailable):
        return HTTPException(status_code=503, detail="Content store unavailable")
    return None


def raise_for_domain_error(exc: Exception) -> None:
    http_error = http_error_for(exc)
    if http_error:
        raise http_error from exc
