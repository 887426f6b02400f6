"""
Version comparison, naming and encoding for gitversion.

These are pure functions over strings and the VersionSpec value object;
they do no I/O and never touch git.

Version name format:

    MAIN[.COUNT-COMMIT][-BRANCH]

    1.2.3                   HEAD is tagged, release branch
    1.2.3.4-8f51448         4 commits after the tag, release branch
    1.2.3.4-8f51448-topic   same, built from branch "topic"
    1.2.3-topic             HEAD is tagged, built from branch "topic"

Version code: every run of digits in MAIN is a component, folded as
base-10000 positional digits, so "1.22.333" becomes 100220333.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Tuple

from ..errors import MalformedTagNumeric

logger = logging.getLogger(__name__)

UNKNOWN_VERSION = "unknown"
UNKNOWN_CODE = 0

DEFAULT_RELEASE_BRANCHES = ("master",)

# Each version component occupies four decimal digits of the code
CODE_RADIX = 10000
# Largest signed 64-bit integer
MAX_VERSION_CODE = 2 ** 63 - 1

_COMPONENT = re.compile(r'[0-9]+')
_NON_DIGITS = re.compile(r'[^0-9]+')


def parse_version(version: str) -> Tuple[int, ...]:
    """
    Parse a dotted numeric version into a tuple of integers.

    Args:
        version: Version string such as "1.10.2"

    Returns:
        Tuple of components, e.g. (1, 10, 2)

    Raises:
        MalformedTagNumeric: If any component is not a non-negative integer
    """
    parts = version.split('.')
    if not all(_COMPONENT.fullmatch(part) for part in parts):
        raise MalformedTagNumeric(version)
    return tuple(int(part) for part in parts)


def compare_versions(a: str, b: str) -> int:
    """
    Compare two dotted numeric versions component-wise.

    Components compare as integers ("10" > "9"). When all shared
    components are equal the version with more components is greater,
    so "1.2.1" > "1.2".

    Returns:
        Negative, zero or positive as a is lower, equal or higher than b

    Raises:
        MalformedTagNumeric: If either version is not of the form N(.N)*
    """
    key_a = parse_version(a)
    key_b = parse_version(b)
    return (key_a > key_b) - (key_a < key_b)


def _lenient_key(version: str) -> Tuple[int, ...]:
    return tuple(int(fragment) for fragment in _COMPONENT.findall(version))


def highest_version(versions: Iterable[str]) -> Optional[str]:
    """
    Pick the highest version out of several tags on one commit.

    Malformed versions are skipped. If every candidate is malformed, the
    digit runs inside each one are compared instead so a result is still
    produced. Numerically equal candidates ("1.02" and "1.2") are ordered
    by their text to keep the choice stable.

    Returns:
        The highest version, or None when versions is empty
    """
    versions = list(versions)
    candidates = []
    for version in versions:
        try:
            candidates.append((parse_version(version), version))
        except MalformedTagNumeric:
            logger.warning(f"Skipping tag version '{version}': not of the form N(.N)*")

    if candidates:
        return max(candidates)[1]
    if not versions:
        return None
    return max((_lenient_key(v), v) for v in versions)[1]


def encode_version_code(main_version: Optional[str], limit: int = MAX_VERSION_CODE) -> int:
    """
    Convert a version into a single integer version code.

    The version is split on runs of non-digit characters, empty fragments
    are dropped and the rest are folded as acc * 10000 + fragment.
    Results above `limit` saturate at `limit`.

    Examples:
        encode_version_code("1.22.333")   -> 100220333
        encode_version_code("2")          -> 2
        encode_version_code("1.0-rc2")    -> 100000002
        encode_version_code(None)         -> 0
    """
    if not main_version:
        return UNKNOWN_CODE

    code = 0
    for fragment in _NON_DIGITS.split(main_version):
        if not fragment:
            continue
        code = code * CODE_RADIX + int(fragment)
        if code > limit:
            logger.warning(
                f"Version code for '{main_version}' exceeds {limit}; saturating"
            )
            return limit
    return code


@dataclass(frozen=True)
class VersionSpec:
    """
    Everything needed to name and number a build.

    Attributes:
        main_version: Highest tag on the nearest tagged commit, prefix removed
        commits_since_tag: Commits walked before reaching the tagged commit
        short_commit_id: Abbreviated id of HEAD
        branch_name: Current branch, None when HEAD is detached
        tag_name: Full name of the chosen tag, prefix included
        tagged_commit: Full id of the nearest tagged commit
    """
    main_version: str
    commits_since_tag: int = 0
    short_commit_id: str = ""
    branch_name: Optional[str] = None
    tag_name: Optional[str] = None
    tagged_commit: Optional[str] = None

    def name(self, release_branches: Iterable[str] = DEFAULT_RELEASE_BRANCHES) -> str:
        return format_version_name(self, release_branches)

    def code(self) -> int:
        return encode_version_code(self.main_version)

    def to_dict(self, release_branches: Iterable[str] = DEFAULT_RELEASE_BRANCHES) -> Dict[str, Any]:
        return {
            'name': self.name(release_branches),
            'code': self.code(),
            'main_version': self.main_version,
            'commits_since_tag': self.commits_since_tag,
            'commit': self.short_commit_id,
            'branch': self.branch_name,
            'tag': self.tag_name,
            'tagged_commit': self.tagged_commit,
        }


def format_version_name(
    spec: Optional[VersionSpec],
    release_branches: Iterable[str] = DEFAULT_RELEASE_BRANCHES
) -> str:
    """
    Build MAIN[.COUNT-COMMIT][-BRANCH] from a resolved VersionSpec.

    The count segment is omitted when HEAD is the tagged commit. The
    branch segment is omitted for release branches and for a detached
    HEAD (branch_name is None).

    Args:
        spec: Resolved version, or None when nothing could be resolved
        release_branches: Branch names that get no branch suffix

    Returns:
        Version name, or "unknown" if spec is None
    """
    if spec is None:
        return UNKNOWN_VERSION

    name = spec.main_version
    if spec.commits_since_tag > 0:
        name += f".{spec.commits_since_tag}-{spec.short_commit_id}"
    if spec.branch_name and spec.branch_name not in set(release_branches):
        name += f"-{spec.branch_name}"
    return name
