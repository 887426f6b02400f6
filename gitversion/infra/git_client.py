"""
Git client infrastructure for gitversion.

Provides a clean abstraction over git command execution.
All git access goes through this client, making it:
- Easy to mock for testing
- Consistent in error handling
- Isolated from the version resolution logic

Only read-only plumbing commands are used; nothing here writes to the
repository or talks to a remote.
"""

import os
import subprocess
import weakref
from pathlib import Path
from typing import Iterator, List, Optional, Tuple, Union
import logging

from ..domain import Commit, Tag, DEFAULT_ABBREV
from ..errors import (
    GitCommandError,
    RepositoryNotFound,
    UnbornHistory,
)

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

# git stderr in the C locale; see git_environment()
_NOT_A_REPO = "not a git repository"
_BAD_REVISION = ("unknown revision", "bad revision", "bad object", "ambiguous argument")
_PEELED_SUFFIX = "^{}"


def git_environment() -> dict:
    """Environment for git commands, with messages forced to untranslated English."""
    env = dict(os.environ)
    env.update(LC_ALL="C", LANGUAGE="")
    return env


class GitClient:
    """
    Abstraction over git commands.

    Example:
        client = GitClient()
        with client.open_repository("/path/to/project") as repo:
            head = repo.head_commit()
            for commit in repo.walk_commits(head):
                print(commit.id)
    """

    def __init__(self, timeout: int = 30, abbrev: int = DEFAULT_ABBREV, executable: str = "git"):
        """
        Initialize GitClient.

        Args:
            timeout: Command timeout in seconds (default: 30)
            abbrev: Length of short commit ids (default: 7)
            executable: git executable to run
        """
        self.timeout = timeout
        self.abbrev = abbrev
        self.executable = executable

    def _run(self, args: List[str], cwd: PathLike) -> Tuple[str, str, int]:
        """
        Run a git command to completion.

        Args:
            args: git arguments (e.g., ['rev-parse', 'HEAD'])
            cwd: Working directory

        Returns:
            Tuple of (stdout, stderr, returncode)

        Raises:
            GitCommandError: If the command times out
            OSError: If git cannot be started in cwd
        """
        cmd = [self.executable] + args
        logger.debug(f"Running {' '.join(cmd)} in {cwd}")
        try:
            result = subprocess.run(
                cmd,
                cwd=str(cwd),
                capture_output=True,
                text=True,
                env=git_environment(),
                timeout=self.timeout
            )
        except subprocess.TimeoutExpired:
            logger.warning(f"Git command timed out: {' '.join(cmd)}")
            raise GitCommandError(
                ' '.join(cmd), -1, f"timed out after {self.timeout}s", str(cwd)
            )
        return result.stdout, result.stderr, result.returncode

    def open_repository(self, start_dir: PathLike = ".") -> 'Repository':
        """
        Find the repository containing start_dir.

        Args:
            start_dir: Directory to search from, upward

        Returns:
            Repository handle, to be used as a context manager

        Raises:
            RepositoryNotFound: If start_dir is not inside a work tree
            GitCommandError: If git fails for any other reason
        """
        path = Path(start_dir).expanduser()
        if not path.is_dir():
            raise RepositoryNotFound(str(path))

        stdout, stderr, code = self._run(['rev-parse', '--show-toplevel'], cwd=path)
        if code != 0:
            if _NOT_A_REPO in stderr.lower():
                raise RepositoryNotFound(str(path))
            raise GitCommandError('git rev-parse --show-toplevel', code, stderr, str(path))

        root = Path(stdout.strip())
        logger.debug(f"Opened repository at {root}")
        return Repository(root, self, start_dir=path)


class Repository:
    """
    Read-only handle on one git work tree.

    A handle serves a single resolution pass. Closing it (or leaving the
    `with` block) terminates any commit walk still in progress.
    """

    def __init__(self, root: PathLike, client: GitClient, start_dir: Optional[PathLike] = None):
        self.root = Path(root)
        self.client = client
        self.start_dir = Path(start_dir) if start_dir is not None else self.root
        self._walks = weakref.WeakSet()
        self._closed = False

    def __enter__(self) -> 'Repository':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        """Stop any open walks and release the handle."""
        for walk in list(self._walks):
            walk.close()
        self._walks.clear()
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed

    def _git(self, args: List[str]) -> Tuple[str, str, int]:
        if self._closed:
            raise ValueError("Repository handle is closed")
        return self.client._run(args, cwd=self.root)

    def head_commit(self) -> str:
        """
        Full id of the commit HEAD points at.

        Raises:
            UnbornHistory: If the current branch has no commits yet
        """
        stdout, stderr, code = self._git(['rev-parse', '--verify', '--quiet', 'HEAD^{commit}'])
        if code == 0 and stdout.strip():
            return stdout.strip()
        if not stderr.strip():
            raise UnbornHistory(str(self.root))
        raise GitCommandError('git rev-parse HEAD', code, stderr, str(self.root))

    def current_branch(self) -> Optional[str]:
        """Current branch name, or None when HEAD is detached."""
        stdout, stderr, code = self._git(['symbolic-ref', '--quiet', '--short', 'HEAD'])
        if code == 0 and stdout.strip():
            return stdout.strip()
        if code == 1:
            return None
        raise GitCommandError('git symbolic-ref HEAD', code, stderr, str(self.root))

    def list_tags(self) -> List[Tag]:
        """
        List all tags, each resolved to the commit it points at.

        Annotated tags are peeled; lightweight tags already name their commit.
        """
        stdout, stderr, code = self._git(['show-ref', '--tags', '--dereference'])
        if code != 0:
            # show-ref exits 1 when there are no tags at all
            if code == 1 and not stderr.strip():
                return []
            raise GitCommandError('git show-ref --tags', code, stderr, str(self.root))

        targets = {}
        for line in stdout.splitlines():
            parts = line.split(None, 1)
            if len(parts) != 2:
                continue
            object_id, ref = parts
            name = ref.strip()
            if name.startswith('refs/tags/'):
                name = name[len('refs/tags/'):]
            if name.endswith(_PEELED_SUFFIX):
                targets[name[:-len(_PEELED_SUFFIX)]] = object_id
            else:
                targets.setdefault(name, object_id)

        return [Tag(name=name, target=target) for name, target in targets.items()]

    def walk_commits(self, start: str, path_filter: Optional[str] = None) -> Iterator[Commit]:
        """
        Lazily walk all ancestors of start, newest first.

        Commits are delivered in reverse-chronological topological order
        (no parent before all of its children) and each commit once, even
        across merges.

        Args:
            start: Commit id or revision to start from (inclusive)
            path_filter: Only yield commits touching this path, relative
                to the repository root

        Returns:
            Generator of Commit; closing it stops the underlying git process

        Raises:
            UnbornHistory: If start does not resolve to a commit
            GitCommandError: If git fails for any other reason
        """
        walk = self._walk(start, path_filter)
        self._walks.add(walk)
        return walk

    def _walk(self, start: str, path_filter: Optional[str]) -> Iterator[Commit]:
        if self._closed:
            raise ValueError("Repository handle is closed")

        cmd = [self.client.executable, 'rev-list', '--date-order', '--parents', start]
        if path_filter is not None:
            cmd += ['--', path_filter]
        logger.debug(f"Walking {' '.join(cmd)} in {self.root}")

        proc = subprocess.Popen(
            cmd,
            cwd=str(self.root),
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            env=git_environment()
        )
        try:
            for line in proc.stdout:
                ids = line.split()
                if ids:
                    yield Commit(id=ids[0], parents=tuple(ids[1:]))

            stderr = proc.stderr.read()
            try:
                code = proc.wait(timeout=self.client.timeout)
            except subprocess.TimeoutExpired:
                raise GitCommandError(
                    ' '.join(cmd), -1, f"timed out after {self.client.timeout}s", str(self.root)
                )
            if code != 0:
                if any(marker in stderr for marker in _BAD_REVISION):
                    raise UnbornHistory(str(self.root))
                raise GitCommandError(' '.join(cmd), code, stderr, str(self.root))
        finally:
            if proc.poll() is None:
                proc.kill()
                proc.wait()
            proc.stdout.close()
            proc.stderr.close()

    def short_id(self, commit: Union[Commit, str]) -> str:
        """Abbreviated id of a commit, for display."""
        if isinstance(commit, Commit):
            return commit.short_id(self.client.abbrev)
        return commit[:self.client.abbrev]

    def relative_path(self, path: Optional[PathLike] = None) -> str:
        """
        Path relative to the repository root, in git's '/' notation.

        Args:
            path: Directory inside the work tree (default: the start directory)
        """
        target = Path(path) if path is not None else self.start_dir
        relative = os.path.relpath(target.resolve(), self.root.resolve())
        return Path(relative).as_posix()
