from pathlib import Path
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


def choose_env_file() -> str:
    return ".env.local" if Path(".env.local").exists() else ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=choose_env_file(),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",  # tolerate unrelated env vars
    )

    # GitHub repository used as the content store
    GITHUB_TOKEN: str = ""
    REPO_OWNER: str = ""
    REPO_NAME: str = ""
    GITHUB_BRANCH: str = ""
    GITHUB_API_URL: str = "https://api.github.com"
    STORE_TIMEOUT_SECONDS: float = 10.0

    # Content layout inside the repository
    POSTS_PATH: str = "content/posts"
    COMMENTS_PATH: str = "content/comments"

    # Comments
    COMMENT_WRITE_ATTEMPTS: int = 3

    # Blog
    CATEGORY_ORDER: List[str] = ["合気道", "技術", "ラーメン", "ガジェット", "地理", "日常"]

    # Logging
    LOG_LEVEL: str = "INFO"

    @property
    def is_store_configured(self) -> bool:
        return bool(self.GITHUB_TOKEN and self.REPO_OWNER and self.REPO_NAME)


# Global settings instance (evaluated at import, but reads env on construction)
settings = Settings()
