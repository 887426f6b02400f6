"""
Shared fixtures for gitversion tests.

`git_repo` builds real throwaway repositories with deterministic
commit dates, so walk order never depends on how fast the test runs.
"""

import os
import shutil
import subprocess
from pathlib import Path

import pytest

BASE_TIMESTAMP = 1700000000


class GitRepo:
    """A scratch git repository driven through the git CLI."""

    def __init__(self, path: Path):
        self.path = path
        self._tick = 0

    def git(self, *args, env=None) -> str:
        result = subprocess.run(
            ["git"] + list(args),
            cwd=self.path,
            capture_output=True,
            text=True,
            check=True,
            env=env,
        )
        return result.stdout.strip()

    def init(self) -> "GitRepo":
        self.path.mkdir(parents=True, exist_ok=True)
        self.git("init", "-q")
        self.git("symbolic-ref", "HEAD", "refs/heads/master")
        self.git("config", "user.email", "test@example.com")
        self.git("config", "user.name", "Test User")
        self.git("config", "commit.gpgsign", "false")
        self.git("config", "tag.gpgsign", "false")
        return self

    def _dated_env(self) -> dict:
        self._tick += 1
        stamp = f"{BASE_TIMESTAMP + self._tick * 60} +0000"
        env = os.environ.copy()
        env["GIT_AUTHOR_DATE"] = stamp
        env["GIT_COMMITTER_DATE"] = stamp
        return env

    def commit(self, message: str = "change", path: str = "file.txt") -> str:
        """Append a line to path, commit it and return the new commit id."""
        file_path = self.path / path
        file_path.parent.mkdir(parents=True, exist_ok=True)
        with open(file_path, "a") as f:
            f.write(f"{message} {self._tick}\n")
        self.git("add", path)
        self.git("commit", "-q", "-m", message, env=self._dated_env())
        return self.head()

    def merge(self, branch: str, message: str = "merge") -> str:
        self.git("merge", "-q", "--no-ff", "-m", message, branch, env=self._dated_env())
        return self.head()

    def tag(self, name: str, target: str = "HEAD", annotated: bool = False) -> None:
        if annotated:
            self.git("tag", "-a", "-m", f"release {name}", name, target, env=self._dated_env())
        else:
            self.git("tag", name, target)

    def checkout(self, *args) -> None:
        self.git("checkout", "-q", *args)

    def head(self) -> str:
        return self.git("rev-parse", "HEAD")

    def short(self, rev: str = "HEAD", length: int = 7) -> str:
        return self.git("rev-parse", rev)[:length]


@pytest.fixture
def no_parent_repo(tmp_path, monkeypatch):
    """Stop git discovery from escaping tmp_path into an enclosing repository."""
    monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path))
    for name in list(os.environ):
        if name.startswith("GITVERSION_"):
            monkeypatch.delenv(name)
    return tmp_path


@pytest.fixture
def git_repo(no_parent_repo):
    """An initialised, empty repository on branch master."""
    if shutil.which("git") is None:
        pytest.skip("git is not installed")
    return GitRepo(no_parent_repo / "repo").init()
