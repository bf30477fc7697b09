from pathlib import Path

from repoblog.settings import Settings, choose_env_file


def test_store_is_configured_only_with_token_and_repository():
    assert Settings(GITHUB_TOKEN="t", REPO_OWNER="me", REPO_NAME="blog").is_store_configured
    assert not Settings(GITHUB_TOKEN="", REPO_OWNER="me", REPO_NAME="blog").is_store_configured
    assert not Settings(GITHUB_TOKEN="t", REPO_OWNER="me", REPO_NAME="").is_store_configured


def test_content_paths_and_category_order_read_from_environment(monkeypatch):
    monkeypatch.setenv("POSTS_PATH", "site/posts")
    monkeypatch.setenv("CATEGORY_ORDER", '["Books", "Food"]')

    s = Settings()

    assert s.POSTS_PATH == "site/posts"
    assert s.CATEGORY_ORDER == ["Books", "Food"]


def test_choose_env_file_prefers_env_local(monkeypatch):
    monkeypatch.setattr(Path, "exists", lambda self: str(self) == ".env.local")
    assert choose_env_file() == ".env.local"


def test_choose_env_file_falls_back(monkeypatch):
    monkeypatch.setattr(Path, "exists", lambda self: False)
    assert choose_env_file() == ".env"
