import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from repoblog import dependencies as deps
from repoblog.routers.errors import raise_for_domain_error
from repoblog.schemas.comments import Comment, CommentInput
from repoblog.services.comments_service import CommentsService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/comments", response_model=Comment, response_model_exclude_none=True)
def submit_comment(
    data: CommentInput,
    service: CommentsService = Depends(deps.get_comments_service),
):
    """Public comment submission. New comments start unread."""
    if data.missing_fields():
        raise HTTPException(status_code=400, detail="Missing fields")

    try:
        return service.append(data.postSlug, data)
    except HTTPException:
        raise
    except Exception as e:
        raise_for_domain_error(e)
        logger.error(f"Failed to save comment for {data.postSlug}: {e}")
        raise HTTPException(status_code=500, detail="Failed to save comment")


@router.get(
    "/comments", response_model=List[Comment], response_model_exclude_none=True
)
def list_comments(
    slug: Optional[str] = Query(None),
    service: CommentsService = Depends(deps.get_comments_service),
):
    if not slug:
        raise HTTPException(status_code=400, detail="Slug is required")

    try:
        return service.list_for_post(slug)
    except Exception as e:
        raise_for_domain_error(e)
        logger.error(f"Failed to load comments for {slug}: {e}")
        raise HTTPException(status_code=500, detail="Failed to retrieve comments")
