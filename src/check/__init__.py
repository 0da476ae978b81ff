"""Known-import checking of files and repositories."""

from check.run import (
    FileReport,
    RepoReport,
    analyze_file,
    analyze_source,
    check_repo,
    fix_repo,
)

__all__ = [
    "FileReport",
    "RepoReport",
    "analyze_file",
    "analyze_source",
    "check_repo",
    "fix_repo",
]
