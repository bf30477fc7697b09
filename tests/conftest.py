import itertools
import textwrap

from repoblog.db.github import FileContent, FileEntry
from repoblog.exceptions import Conflict, NotFound, RevisionRequired


class FakeFileStore:
    """
    Minimal in-memory stand-in for GitHubFileStore.
    Every write gets a fresh revision; queue exceptions in fail_writes to make
    the next writes fail.
    """

    def __init__(self, files: dict | None = None):
        self.files: dict[str, bytes] = {}
        self.revisions: dict[str, str] = {}
        self.commits: list[tuple[str, str]] = []
        self.fail_writes: list[Exception] = []
        self.closed = False
        self._counter = itertools.count(1)
        for path, content in (files or {}).items():
            self._put(path, content)

    def _put(self, path: str, content) -> str:
        if isinstance(content, str):
            content = content.encode("utf-8")
        self.files[path] = content
        self.revisions[path] = f"rev-{next(self._counter)}"
        return self.revisions[path]

    def list_directory(self, path: str) -> list[FileEntry]:
        prefix = path.strip("/") + "/"
        entries = []
        seen_dirs = set()
        for file_path in self.files:
            if not file_path.startswith(prefix):
                continue
            rest = file_path[len(prefix):]
            if "/" in rest:
                name = rest.split("/", 1)[0]
                if name not in seen_dirs:
                    seen_dirs.add(name)
                    entries.append(FileEntry(name, prefix + name, "tree", type="dir"))
                continue
            entries.append(FileEntry(rest, file_path, self.revisions[file_path]))
        if not entries:
            raise NotFound(path, path=path)
        return entries

    def read_file(self, path: str) -> FileContent:
        if path not in self.files:
            raise NotFound(path, path=path)
        return FileContent(path, self.files[path], self.revisions[path])

    def write_file(self, path: str, content: bytes, message: str, revision=None) -> str:
        if self.fail_writes:
            raise self.fail_writes.pop(0)
        current = self.revisions.get(path)
        if current != revision:
            raise Conflict(f"{path} is at {current}, got {revision}", path=path)
        self.commits.append((message, path))
        return self._put(path, content)

    def delete_file(self, path: str, revision, message: str) -> None:
        if not revision:
            raise RevisionRequired(path, path=path)
        if path not in self.files:
            raise NotFound(path, path=path)
        if self.revisions[path] != revision:
            raise Conflict(path, path=path)
        self.commits.append((message, path))
        del self.files[path]
        del self.revisions[path]

    def close(self):
        self.closed = True


def markdown(text: str) -> str:
    """Dedent a triple-quoted document the way it would be stored."""
    return textwrap.dedent(text).lstrip()


class FakePostsService:
    """
    Minimal posts service stand-in for router tests.
    """

    def __init__(self, list_posts_return=None, get_post_return=None):
        self._list_posts_return = list_posts_return or []
        self._get_post_return = get_post_return
        self.calls = []

    def list_posts(self):
        return self._list_posts_return

    def get_post(self, slug: str):
        return self._get_post_return

    def delete_post(self, slug, revision):
        self.calls.append(("delete", slug, revision))
