"""
Version service for gitversion.

Runs one resolution pass against the repository containing a project
directory and turns the result into a version name and version code.
This is the primary API for the CLI and for build scripts.

A missing repository, a repository without commits and a history
without version tags are normal situations at build time. They all
resolve to the "unknown" name and a code of 0 instead of raising.
"""

from contextlib import closing
from pathlib import Path
from typing import Optional, Union
import logging

from ..config import VersionConfig
from ..domain import (
    VersionSpec,
    UNKNOWN_VERSION,
    UNKNOWN_CODE,
    encode_version_code,
    format_version_name,
)
from ..errors import NoMatchingTag, RepositoryNotFound, UnbornHistory
from ..infra import GitClient, Repository
from .resolver import count_touching, find_nearest_tags

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class VersionService:
    """
    Service for resolving build versions from git history.

    Example:
        service = VersionService(VersionConfig(tag_prefix="v"))
        print(service.version_name("/path/to/project"))   # 1.2.3.4-8f51448-topic
        print(service.version_code("/path/to/project"))   # 100020003
    """

    def __init__(
        self,
        config: Optional[VersionConfig] = None,
        git_client: Optional[GitClient] = None
    ):
        """
        Initialize VersionService.

        Args:
            config: Version settings (defaults if None)
            git_client: Git client instance (creates one from config if None)
        """
        self.config = config or VersionConfig()
        self.git = git_client or GitClient(
            timeout=self.config.git_timeout,
            abbrev=self.config.abbrev
        )

    def resolve(self, start_dir: PathLike = ".") -> VersionSpec:
        """
        Resolve the version of the project in start_dir.

        Raises:
            RepositoryNotFound: If start_dir is not inside a git work tree
            UnbornHistory: If the repository has no commits
            NoMatchingTag: If no reachable commit has a versioned tag
            GitCommandError: If git fails for any other reason
        """
        with self.git.open_repository(start_dir) as repo:
            return self._resolve(repo)

    def _resolve(self, repo: Repository) -> VersionSpec:
        prefix = self.config.tag_prefix
        head = repo.head_commit()
        branch = repo.current_branch()
        tags = repo.list_tags()

        with closing(repo.walk_commits(head)) as commits:
            nearest = find_nearest_tags(commits, tags, prefix)
        if nearest is None:
            raise NoMatchingTag(prefix, str(repo.root))

        distance = nearest.distance
        if self.config.restrict_directory and distance:
            path_filter = repo.relative_path()
            with closing(repo.walk_commits(head, path_filter=path_filter)) as touching:
                distance = count_touching(touching, nearest.ahead)
            logger.debug(
                f"{distance} of {nearest.distance} commits since tag touch '{path_filter}'"
            )

        main_version = nearest.version
        return VersionSpec(
            main_version=main_version,
            commits_since_tag=distance,
            short_commit_id=repo.short_id(head),
            branch_name=branch,
            tag_name=prefix + main_version,
            tagged_commit=nearest.commit,
        )

    def resolve_or_none(self, start_dir: PathLike = ".") -> Optional[VersionSpec]:
        """
        Resolve the version, or None when there is nothing to resolve.

        Only git failures and OS errors propagate.
        """
        try:
            return self.resolve(start_dir)
        except RepositoryNotFound as e:
            logger.info(f"{e}; version is {UNKNOWN_VERSION}")
        except UnbornHistory as e:
            logger.info(f"{e}; version is {UNKNOWN_VERSION}")
        except NoMatchingTag as e:
            logger.info(f"{e}; version is {UNKNOWN_VERSION}")
        return None

    def version_name(self, start_dir: PathLike = ".") -> str:
        """Version name MAIN[.COUNT-COMMIT][-BRANCH], or "unknown"."""
        return format_version_name(
            self.resolve_or_none(start_dir),
            self.config.release_branches
        )

    def version_code(self, start_dir: PathLike = ".") -> int:
        """Integer version code of the nearest tag, or 0."""
        spec = self.resolve_or_none(start_dir)
        if spec is None:
            return UNKNOWN_CODE
        return encode_version_code(spec.main_version)


def _service(config: Optional[VersionConfig], start_dir: PathLike) -> VersionService:
    if config is None:
        config = VersionConfig.load(start_dir)
    return VersionService(config)


def resolve_version_spec(
    config: Optional[VersionConfig] = None,
    start_dir: PathLike = "."
) -> Optional[VersionSpec]:
    """Resolve the VersionSpec for start_dir, None if unknown."""
    return _service(config, start_dir).resolve_or_none(start_dir)


def resolve_version_name(
    config: Optional[VersionConfig] = None,
    start_dir: PathLike = "."
) -> str:
    """
    Version name for the project in start_dir.

    Args:
        config: Settings to use; loaded from the project directory if None
        start_dir: Project directory, searched upward for the repository

    Returns:
        Version name, "unknown" if it cannot be determined
    """
    return _service(config, start_dir).version_name(start_dir)


def resolve_version_code(
    config: Optional[VersionConfig] = None,
    start_dir: PathLike = "."
) -> int:
    """
    Version code for the project in start_dir.

    Only config.tag_prefix is used. Returns 0 if it cannot be determined.
    """
    return _service(config, start_dir).version_code(start_dir)
