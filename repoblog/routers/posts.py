import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from repoblog import dependencies as deps
from repoblog.routers.errors import raise_for_domain_error
from repoblog.schemas.blog import (
    ArchiveBucket,
    CategoryCount,
    PostMeta,
    PostPage,
    Sidebar,
)
from repoblog.services import blog_views
from repoblog.services.posts_service import PostsService
from repoblog.settings import Settings

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/posts", response_model=List[PostMeta])
def list_posts(
    category: Optional[str] = Query(None),
    archive: Optional[str] = Query(None, pattern=r"^\d{4}-\d{2}$"),
    service: PostsService = Depends(deps.get_posts_service),
):
    """Published posts, newest first, optionally filtered by category or month."""
    try:
        posts = blog_views.published_only(service.list_posts())
        if category:
            posts = blog_views.filter_by_category(posts, category)
        elif archive:
            posts = blog_views.filter_by_archive(posts, archive)
        return posts
    except HTTPException:
        raise
    except Exception as e:
        raise_for_domain_error(e)
        logger.error(f"Unexpected error listing posts: {e}")
        raise HTTPException(status_code=500, detail="Failed to retrieve posts")


@router.get("/posts/{slug}", response_model=PostPage)
def get_post(
    slug: str,
    service: PostsService = Depends(deps.get_posts_service),
):
    """Get a single published post with links to its neighbours."""
    try:
        post = service.get_post(slug)
        if not post or not post.published:
            raise HTTPException(status_code=404, detail="Post not found")
        published = blog_views.published_only(service.list_posts())
        return PostPage(
            post=post, navigation=blog_views.adjacent_posts(published, slug)
        )
    except HTTPException:
        raise
    except Exception as e:
        raise_for_domain_error(e)
        logger.error(f"Unexpected error retrieving post {slug}: {e}")
        raise HTTPException(status_code=500, detail="Failed to retrieve post")


@router.get("/categories", response_model=List[CategoryCount])
def list_categories(
    service: PostsService = Depends(deps.get_posts_service),
    current_settings: Settings = Depends(deps.get_settings),
):
    try:
        return blog_views.group_categories(
            service.list_posts(), current_settings.CATEGORY_ORDER
        )
    except Exception as e:
        raise_for_domain_error(e)
        logger.error(f"Unexpected error listing categories: {e}")
        raise HTTPException(status_code=500, detail="Failed to retrieve categories")


@router.get("/archives", response_model=List[ArchiveBucket])
def list_archives(service: PostsService = Depends(deps.get_posts_service)):
    try:
        return blog_views.archive_buckets(service.list_posts())
    except Exception as e:
        raise_for_domain_error(e)
        logger.error(f"Unexpected error listing archives: {e}")
        raise HTTPException(status_code=500, detail="Failed to retrieve archives")


@router.get("/sidebar", response_model=Sidebar)
def get_sidebar(
    service: PostsService = Depends(deps.get_posts_service),
    current_settings: Settings = Depends(deps.get_settings),
):
    """Published total, recent posts, categories and archives in one call."""
    try:
        return blog_views.build_sidebar(
            service.list_posts(), current_settings.CATEGORY_ORDER
        )
    except Exception as e:
        raise_for_domain_error(e)
        logger.error(f"Unexpected error building sidebar: {e}")
        raise HTTPException(status_code=500, detail="Failed to retrieve sidebar")
