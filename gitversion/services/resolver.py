"""
Nearest tagged ancestor lookup.

Walks history from HEAD backwards and stops at the first commit that
carries at least one versioned tag. The commits passed on the way are
what the version name counts as "commits since tag".
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from ..domain import Commit, Tag, highest_version, matches_tag, strip_prefix

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NearestTag:
    """
    Result of a nearest tag lookup.

    Attributes:
        commit: Full id of the nearest tagged commit
        versions: Versions of every matching tag on that commit, prefix removed,
            sorted by tag name
        ahead: Ids of the commits walked before reaching the tagged commit
    """
    commit: str
    versions: Tuple[str, ...]
    ahead: Tuple[str, ...] = ()

    @property
    def distance(self) -> int:
        """Number of commits between HEAD (inclusive) and the tagged commit (exclusive)."""
        return len(self.ahead)

    @property
    def version(self) -> str:
        """The highest version on the tagged commit."""
        return highest_version(self.versions)


def index_tags(tags: Iterable[Tag], prefix: str = "") -> Dict[str, List[Tag]]:
    """
    Group versioned tags by the commit they point at.

    Args:
        tags: All tags of the repository
        prefix: Literal tag prefix

    Returns:
        Dict of commit id -> tags on that commit, name-sorted
    """
    by_commit: Dict[str, List[Tag]] = {}
    for tag in tags:
        if matches_tag(tag.name, prefix):
            by_commit.setdefault(tag.target, []).append(tag)
    for tagged in by_commit.values():
        tagged.sort(key=lambda t: t.name)
    return by_commit


def find_nearest_tags(
    commits: Iterable[Commit],
    tags: Iterable[Tag],
    prefix: str = ""
) -> Optional[NearestTag]:
    """
    Find the first commit in walk order that carries a versioned tag.

    The walk is abandoned as soon as a tagged commit is found, so older
    history is never read.

    Args:
        commits: Commits newest first, as produced by Repository.walk_commits
        tags: All tags of the repository
        prefix: Literal tag prefix

    Returns:
        NearestTag, or None when no reachable commit has a matching tag
    """
    by_commit = index_tags(tags, prefix)
    if not by_commit:
        logger.info(f"No tags match '{prefix}[0-9]*'")
        return None

    ahead: List[str] = []
    for commit in commits:
        tagged = by_commit.get(commit.id)
        if tagged:
            versions = tuple(strip_prefix(tag.name, prefix) for tag in tagged)
            logger.debug(
                f"Nearest tagged commit {commit.id} ({', '.join(t.name for t in tagged)}) "
                f"after {len(ahead)} commits"
            )
            return NearestTag(commit=commit.id, versions=versions, ahead=tuple(ahead))
        ahead.append(commit.id)

    logger.info(f"No commit reachable from HEAD carries a '{prefix}[0-9]*' tag")
    return None


def count_touching(commits: Iterable[Commit], candidates: Iterable[str]) -> int:
    """
    Count how many candidate commits appear in a (path filtered) walk.

    Stops reading the walk once every candidate has been seen.
    """
    remaining = set(candidates)
    count = 0
    if not remaining:
        return count
    for commit in commits:
        if commit.id in remaining:
            remaining.discard(commit.id)
            count += 1
            if not remaining:
                break
    return count
