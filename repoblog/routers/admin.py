import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from repoblog import dependencies as deps
from repoblog.routers.errors import raise_for_domain_error
from repoblog.schemas.blog import Post, PostCreate, PostMeta, PostUpdate, SaveResult
from repoblog.schemas.comments import (
    Comment,
    CommentsOverview,
    CommentsReplace,
    CommentThread,
    ReplyInput,
)
from repoblog.services.comments_service import CommentsService, unread_count
from repoblog.services.posts_service import PostsService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/posts", response_model=List[PostMeta])
def list_all_posts(service: PostsService = Depends(deps.get_posts_service)):
    """All posts including drafts."""
    try:
        return service.list_posts()
    except Exception as e:
        raise_for_domain_error(e)
        logger.error(f"Unexpected error listing posts: {e}")
        raise HTTPException(status_code=500, detail="Failed to retrieve posts")


@router.get("/posts/{slug}", response_model=Post)
def get_post_for_edit(slug: str, service: PostsService = Depends(deps.get_posts_service)):
    try:
        post = service.get_post(slug)
    except Exception as e:
        raise_for_domain_error(e)
        logger.error(f"Unexpected error retrieving post {slug}: {e}")
        raise HTTPException(status_code=500, detail="Failed to retrieve post")
    if not post:
        raise HTTPException(status_code=404, detail="Post not found")
    return post


@router.post("/posts", response_model=SaveResult, status_code=201)
def create_post(data: PostCreate, service: PostsService = Depends(deps.get_posts_service)):
    try:
        return service.create_post(data.slug, data)
    except Exception as e:
        raise_for_domain_error(e)
        logger.error(f"Failed to create post {data.slug}: {e}")
        raise HTTPException(status_code=500, detail="Failed to save post")


@router.put("/posts/{slug}", response_model=SaveResult)
def update_post(
    slug: str,
    data: PostUpdate,
    service: PostsService = Depends(deps.get_posts_service),
):
    try:
        return service.update_post(slug, data, data.revision)
    except Exception as e:
        raise_for_domain_error(e)
        logger.error(f"Failed to update post {slug}: {e}")
        raise HTTPException(status_code=500, detail="Failed to save post")


@router.delete("/posts/{slug}")
def delete_post(
    slug: str,
    revision: Optional[str] = Query(None),
    service: PostsService = Depends(deps.get_posts_service),
):
    try:
        service.delete_post(slug, revision)
    except Exception as e:
        raise_for_domain_error(e)
        logger.error(f"Failed to delete post {slug}: {e}")
        raise HTTPException(status_code=500, detail="Failed to delete post")
    return {"status": "deleted", "slug": slug}


@router.get("/comments", response_model=CommentsOverview, response_model_exclude_none=True)
def list_all_comments(service: CommentsService = Depends(deps.get_comments_service)):
    try:
        comments = service.list_all()
    except Exception as e:
        raise_for_domain_error(e)
        logger.error(f"Failed to load comments: {e}")
        raise HTTPException(status_code=500, detail="Failed to retrieve comments")
    return CommentsOverview(unread=unread_count(comments), comments=comments)


@router.get(
    "/comments/{slug}", response_model=CommentThread, response_model_exclude_none=True
)
def get_comment_thread(
    slug: str, service: CommentsService = Depends(deps.get_comments_service)
):
    try:
        return service.get_thread(slug)
    except Exception as e:
        raise_for_domain_error(e)
        logger.error(f"Failed to load comments for {slug}: {e}")
        raise HTTPException(status_code=500, detail="Failed to retrieve comments")


@router.put("/comments/{slug}")
def replace_comments(
    slug: str,
    data: CommentsReplace,
    service: CommentsService = Depends(deps.get_comments_service),
):
    try:
        revision = service.replace_all(slug, data.comments, data.revision)
    except Exception as e:
        raise_for_domain_error(e)
        logger.error(f"Failed to save comments for {slug}: {e}")
        raise HTTPException(status_code=500, detail="Failed to save comments")
    return {"slug": slug, "revision": revision}


@router.post(
    "/comments/{slug}/{comment_id}/read",
    response_model=Comment,
    response_model_exclude_none=True,
)
def mark_comment_read(
    slug: str,
    comment_id: str,
    service: CommentsService = Depends(deps.get_comments_service),
):
    try:
        return service.mark_read(slug, comment_id)
    except Exception as e:
        raise_for_domain_error(e)
        logger.error(f"Failed to mark comment {comment_id} on {slug} as read: {e}")
        raise HTTPException(status_code=500, detail="Failed to save comments")


@router.post(
    "/comments/{slug}/{comment_id}/reply",
    response_model=Comment,
    response_model_exclude_none=True,
)
def reply_to_comment(
    slug: str,
    comment_id: str,
    data: ReplyInput,
    service: CommentsService = Depends(deps.get_comments_service),
):
    try:
        return service.reply(slug, comment_id, data.reply)
    except Exception as e:
        raise_for_domain_error(e)
        logger.error(f"Failed to reply to comment {comment_id} on {slug}: {e}")
        raise HTTPException(status_code=500, detail="Failed to save comments")
