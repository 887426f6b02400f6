"""
gitversion - Build version names and codes from git tags.

gitversion reads the local history of a checkout and derives:

- a version name, MAIN[.COUNT-COMMIT][-BRANCH], e.g. "1.2.3.4-8f51448-topic"
- a version code, one integer with four decimal digits per version
  component, e.g. 100020003 for "1.2.3"

where MAIN is the highest version tag on the nearest tagged ancestor of
HEAD. No version string is ever stored in the repository, and nothing
is written to it.

Quick Start:
    import gitversion

    # Settings from .gitversion.* / pyproject.toml in the project directory
    name = gitversion.resolve_version_name(start_dir="path/to/project")
    code = gitversion.resolve_version_code(start_dir="path/to/project")

    # Or with explicit settings
    config = gitversion.VersionConfig(tag_prefix="v", release_branches=["main"])
    name = gitversion.resolve_version_name(config, "path/to/project")

    # Everything behind the name
    spec = gitversion.resolve_version_spec(config, "path/to/project")
    if spec is not None:
        print(spec.main_version, spec.commits_since_tag, spec.branch_name)

When there is no repository, no commit or no matching tag, the name is
"unknown" and the code is 0.
"""

__version__ = "0.3.0"

# Domain objects
from .domain import (
    Tag,
    Commit,
    VersionSpec,
    compare_versions,
    encode_version_code,
    format_version_name,
    matches_tag,
    UNKNOWN_VERSION,
    UNKNOWN_CODE,
)

# Errors
from .errors import (
    RepositoryError,
    RepositoryNotFound,
    UnbornHistory,
    NoMatchingTag,
    MalformedTagNumeric,
    GitCommandError,
)

# Configuration
from .config import VersionConfig, load_config

# Services
from .services import (
    VersionService,
    resolve_version_spec,
    resolve_version_name,
    resolve_version_code,
)

__all__ = [
    # Version
    "__version__",
    # Domain objects
    "Tag",
    "Commit",
    "VersionSpec",
    "compare_versions",
    "encode_version_code",
    "format_version_name",
    "matches_tag",
    "UNKNOWN_VERSION",
    "UNKNOWN_CODE",
    # Errors
    "RepositoryError",
    "RepositoryNotFound",
    "UnbornHistory",
    "NoMatchingTag",
    "MalformedTagNumeric",
    "GitCommandError",
    # Configuration
    "VersionConfig",
    "load_config",
    # Services
    "VersionService",
    "resolve_version_spec",
    "resolve_version_name",
    "resolve_version_code",
]
