"""Shared fixtures: fabricated histories and throwaway git repositories."""

from pathlib import Path

import pytest
from git import Actor, Repo

from labgrader.config import BOT_SIGNATURES, IGNORED_PATH_PREFIXES, IGNORED_PATHS_EXACT
from labgrader.models import ClassifierConfig, CommitRecord


STUDENT = Actor("Sara Student", "sara@example.edu")


class FakeHistoryProvider:
    """In-memory history: commits newest-first plus a changed-files table."""

    def __init__(self, commits, changed=None, fail_listing=None, fail_files=()):
        self.commits = list(commits)
        self.changed = changed or {}
        self.fail_listing = fail_listing
        self.fail_files = set(fail_files)
        self.listed_with: list[int] = []
        self.files_requested: list[str] = []

    def list_commits(self, max_count):
        self.listed_with.append(max_count)
        if self.fail_listing:
            raise self.fail_listing
        return self.commits[:max_count]

    def changed_files(self, commit_id):
        self.files_requested.append(commit_id)
        if commit_id in self.fail_files:
            raise RuntimeError(f"diff failed for {commit_id}")
        return set(self.changed.get(commit_id, ()))


@pytest.fixture
def fake_history():
    """The FakeHistoryProvider class, for building fabricated histories."""
    return FakeHistoryProvider


@pytest.fixture
def classifier_config() -> ClassifierConfig:
    """The default classifier rules."""
    return ClassifierConfig.build(BOT_SIGNATURES, IGNORED_PATHS_EXACT, IGNORED_PATH_PREFIXES)


@pytest.fixture
def make_commit():
    """Factory for CommitRecord with student defaults."""

    def _make(commit_id, timestamp=1_000, author="Sara Student", email="sara@example.edu", subject="work"):
        return CommitRecord(
            id=commit_id,
            timestamp=timestamp,
            author_name=author,
            author_email=email,
            subject=subject,
        )

    return _make


@pytest.fixture
def temp_git_repo(tmp_path) -> Repo:
    """Create an empty temporary Git repository."""
    repo_path = tmp_path / "student_repo"
    repo_path.mkdir()
    return Repo.init(repo_path)


@pytest.fixture
def commit_files():
    """Helper that writes files and commits them with a fixed author and time."""

    def _commit(repo: Repo, files: dict[str, str], message: str, epoch_seconds: int, actor: Actor = STUDENT):
        root = Path(repo.working_dir)
        paths = []
        for rel, content in files.items():
            path = root / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)
            paths.append(str(path))
        repo.index.add(paths)
        date = f"{epoch_seconds} +0000"
        return repo.index.commit(
            message,
            author=actor,
            committer=actor,
            author_date=date,
            commit_date=date,
        )

    return _commit
