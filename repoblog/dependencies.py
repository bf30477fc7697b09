from fastapi import Depends, Request

from repoblog.repos.comments_repo import GitHubCommentsRepo
from repoblog.repos.posts_repo import GitHubPostsRepo
from repoblog.services.comments_service import CommentsService
from repoblog.services.posts_service import PostsService
from repoblog.settings import Settings, settings


def get_settings() -> Settings:
    """Small wrapper to allow dependency overrides in tests."""
    return settings


def get_store(request: Request):
    return request.app.state.store


def get_posts_repo(store=Depends(get_store)):
    return GitHubPostsRepo(store)


def get_comments_repo(store=Depends(get_store)):
    return GitHubCommentsRepo(store)


def get_posts_service(repo=Depends(get_posts_repo)):
    return PostsService(repo=repo)


def get_comments_service(repo=Depends(get_comments_repo)):
    return CommentsService(repo=repo)
