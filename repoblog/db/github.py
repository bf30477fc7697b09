import base64
import logging
import urllib.parse
from dataclasses import dataclass
from typing import List, Optional

import httpx

from repoblog.exceptions import (
    Conflict,
    NotFound,
    RevisionRequired,
    StoreError,
    Unauthorized,
    Unavailable,
)
from repoblog.settings import Settings, settings

logger = logging.getLogger(__name__)

GITHUB_MEDIA_TYPE = "application/vnd.github+json"
GITHUB_API_VERSION = "2022-11-28"


@dataclass(frozen=True)
class FileEntry:
    name: str
    path: str
    revision: str
    type: str = "file"


@dataclass(frozen=True)
class FileContent:
    path: str
    content: bytes
    revision: str


class GitHubFileStore:
    """
    Path-addressed, versioned file tree backed by the GitHub contents API.
    The blob SHA of a file is used as its revision token.
    """

    def __init__(
        self,
        owner: str,
        repo: str,
        token: str = "",
        *,
        branch: str = "",
        api_url: str = "https://api.github.com",
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.owner = owner
        self.repo = repo
        self.branch = branch
        headers = {
            "Accept": GITHUB_MEDIA_TYPE,
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self.client = httpx.Client(
            base_url=api_url,
            headers=headers,
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    def close(self) -> None:
        self.client.close()

    def list_directory(self, path: str) -> List[FileEntry]:
        data = self._request("GET", path, params=self._ref_params())
        if not isinstance(data, list):
            # The path exists but is a file
            raise NotFound(f"{path} is not a directory", path=path)
        return [
            FileEntry(
                name=item["name"],
                path=item["path"],
                revision=item["sha"],
                type=item.get("type", "file"),
            )
            for item in data
        ]

    def read_file(self, path: str) -> FileContent:
        data = self._request("GET", path, params=self._ref_params())
        if not isinstance(data, dict) or data.get("type", "file") != "file":
            raise NotFound(f"{path} is not a file", path=path)
        revision = data["sha"]
        encoded = data.get("content") or ""
        if data.get("encoding") == "none" or (not encoded and data.get("size", 0) > 0):
            # Files over 1 MB come without inline content
            logger.info(f"{path} is too large for the contents API, reading blob {revision}")
            encoded = self._read_blob(path, revision, data.get("size", 0))
        content = base64.b64decode(encoded) if encoded else b""
        return FileContent(path=data.get("path", path), content=content, revision=revision)

    def _read_blob(self, path: str, revision: str, size: int) -> str:
        url = f"/repos/{self.owner}/{self.repo}/git/blobs/{revision}"
        try:
            blob = self._send("GET", url, path)
        except NotFound as e:
            # The file exists, so a missing blob must not read as an absent file
            raise StoreError(f"Blob {revision} of {path} is missing", path=path) from e
        encoded = (blob or {}).get("content") or ""
        if (blob or {}).get("encoding") != "base64" or (not encoded and size > 0):
            raise StoreError(f"Could not read content of {path} at {revision}", path=path)
        return encoded

    def write_file(
        self,
        path: str,
        content: bytes,
        message: str,
        revision: Optional[str] = None,
    ) -> str:
        """
        Create or update a file and return its new revision.

        Without a revision the call only creates; GitHub rejects a write to an
        existing path that does not carry the current SHA, which surfaces as
        Conflict.
        """
        payload = {
            "message": message,
            "content": base64.b64encode(content).decode("ascii"),
        }
        if revision:
            payload["sha"] = revision
        if self.branch:
            payload["branch"] = self.branch

        data = self._request("PUT", path, json=payload)
        new_revision = (data or {}).get("content", {}).get("sha")
        if not new_revision:
            raise StoreError(f"Write to {path} returned no revision", path=path)
        logger.info(f"Committed {path} ({message})")
        return new_revision

    def delete_file(self, path: str, revision: Optional[str], message: str) -> None:
        if not revision:
            raise RevisionRequired(f"Deleting {path} requires a revision", path=path)
        payload = {"message": message, "sha": revision}
        if self.branch:
            payload["branch"] = self.branch
        self._request("DELETE", path, json=payload)
        logger.info(f"Deleted {path} ({message})")

    def _ref_params(self) -> dict:
        return {"ref": self.branch} if self.branch else {}

    def _contents_url(self, path: str) -> str:
        quoted = urllib.parse.quote(path.strip("/"), safe="/")
        return f"/repos/{self.owner}/{self.repo}/contents/{quoted}"

    def _request(self, method: str, path: str, **kwargs):
        return self._send(method, self._contents_url(path), path, **kwargs)

    def _send(self, method: str, url: str, path: str, **kwargs):
        try:
            # DELETE with a body is not exposed by the httpx shortcut methods
            response = self.client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            logger.error(f"Timed out on {method} {path}: {e}")
            raise Unavailable(f"Timed out on {method} {path}", path=path) from e
        except httpx.RequestError as e:
            logger.error(f"HTTP connection error on {method} {path}: {e}")
            raise Unavailable(f"Connection error on {method} {path}", path=path) from e

        status = response.status_code
        if status < 300:
            return response.json() if response.content else None

        detail = _error_detail(response)
        if status == 404:
            raise NotFound(detail, path=path)
        if status in (409, 422):
            logger.warning(f"Revision conflict on {method} {path}: {detail}")
            raise Conflict(detail, path=path)
        if status in (401, 403):
            logger.error(f"Store rejected credentials on {method} {path}: {detail}")
            raise Unauthorized(detail, path=path)
        if status >= 500:
            logger.error(f"Store unavailable on {method} {path}: {status} {detail}")
            raise Unavailable(detail, path=path)
        logger.error(f"Unexpected store response on {method} {path}: {status} {detail}")
        raise StoreError(detail, path=path)


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or str(response.status_code)
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return str(response.status_code)


def build_store(settings_obj: Settings = settings) -> GitHubFileStore:
    """
    Create the GitHub-backed store from settings.
    Called once at startup to avoid import-time connections.
    """
    if not settings_obj.is_store_configured:
        logger.warning("GitHub configuration is missing. Check GITHUB_TOKEN, REPO_OWNER and REPO_NAME")
    return GitHubFileStore(
        owner=settings_obj.REPO_OWNER,
        repo=settings_obj.REPO_NAME,
        token=settings_obj.GITHUB_TOKEN,
        branch=settings_obj.GITHUB_BRANCH,
        api_url=settings_obj.GITHUB_API_URL,
        timeout=settings_obj.STORE_TIMEOUT_SECONDS,
    )
