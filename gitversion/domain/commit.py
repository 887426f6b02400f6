"""
Commit domain object for gitversion.
"""

from dataclasses import dataclass
from typing import Tuple

DEFAULT_ABBREV = 7


@dataclass(frozen=True)
class Commit:
    """A commit in the history DAG."""
    id: str
    parents: Tuple[str, ...] = ()

    @property
    def is_merge(self) -> bool:
        return len(self.parents) > 1

    def short_id(self, length: int = DEFAULT_ABBREV) -> str:
        """First `length` hex characters of the commit id."""
        return self.id[:length]
