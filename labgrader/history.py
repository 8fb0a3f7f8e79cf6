"""
Repository history access.

`RepositoryHistoryProvider` is the port the provenance resolver depends on;
`GitHistoryProvider` implements it on top of GitPython. Tests substitute
fabricated histories through the same interface.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, Sequence

from git import Repo
from git.exc import GitError, InvalidGitRepositoryError, NoSuchPathError
from loguru import logger

from .models import CommitRecord


class HistoryUnavailableError(Exception):
    """Raised when commit history cannot be read at all."""


class RepositoryHistoryProvider(Protocol):
    def list_commits(self, max_count: int) -> Sequence[CommitRecord]:
        """Return up to max_count commits, most recent first."""
        ...

    def changed_files(self, commit_id: str) -> set[str]:
        """Return the paths changed by a commit; empty means unknown. Never raises."""
        ...


class GitHistoryProvider:
    """
    Reads commit history from a local git checkout.

    The repository is opened lazily so that a missing or broken checkout
    surfaces as HistoryUnavailableError from list_commits instead of failing
    at construction time.
    """

    def __init__(self, repo_path: Path | str) -> None:
        """
        Initialize the provider.

        Args:
            repo_path: Path to the working tree of the student repository.
        """
        self.repo_path = Path(repo_path)
        self._repo: Repo | None = None

    def _open(self) -> Repo:
        if self._repo is None:
            try:
                self._repo = Repo(self.repo_path)
            except (InvalidGitRepositoryError, NoSuchPathError) as e:
                raise HistoryUnavailableError(f"not a git repository: {self.repo_path}") from e
        return self._repo

    def list_commits(self, max_count: int) -> list[CommitRecord]:
        """
        List commits reachable from HEAD, most recent first.

        A shallow clone silently truncates this list; graders should check out
        with full history.

        Raises:
            HistoryUnavailableError: If the repository cannot be read.
        """
        repo = self._open()
        try:
            commits = list(repo.iter_commits("HEAD", max_count=max_count))
        except (GitError, ValueError) as e:
            # ValueError: HEAD does not resolve (no commits yet)
            raise HistoryUnavailableError(f"git log failed: {e}") from e

        records = [_to_record(c) for c in commits]
        logger.debug(f"Read {len(records)} commits from {self.repo_path}")
        return records

    def changed_files(self, commit_id: str) -> set[str]:
        """
        Paths touched by a commit, relative to the repository root.

        Merge commits report nothing (diff-tree without -m), which the resolver
        treats as unknown.
        """
        try:
            # -z: raw NUL-separated paths, without C-quoting of non-ASCII names
            out = self._open().git.diff_tree("--no-commit-id", "--name-only", "-r", "--root", "-z", commit_id)
        except (GitError, HistoryUnavailableError) as e:
            logger.debug(f"diff-tree failed for {commit_id[:8]}: {e}")
            return set()

        return {path for path in out.split("\0") if path}


def _to_record(commit) -> CommitRecord:
    """Create a CommitRecord from a GitPython Commit object."""
    seconds = commit.committed_date
    return CommitRecord(
        id=commit.hexsha,
        timestamp=int(seconds) * 1000 if seconds is not None else None,
        author_name=commit.author.name or "",
        author_email=commit.author.email or "",
        subject=commit.summary if isinstance(commit.summary, str) else commit.summary.decode("utf-8", "replace"),
    )
