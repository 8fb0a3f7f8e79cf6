"""
Provenance resolution: which commit marks the student's submission time.

Walks history newest-first, skipping automation commits and commits that
only touch grading infrastructure, and selects the first commit that looks
like genuine student work.
"""

from loguru import logger

from .classifier import looks_like_bot, touches_student_work
from .config import SCAN_WINDOW
from .history import RepositoryHistoryProvider
from .models import ClassifierConfig, CommitRecord, ResolutionResult


NOTE_RESOLVED = "selected latest non-bot commit that changes student work (ignores grader-only commits)"
NOTE_RESOLVED_UNKNOWN_FILES = (
    "selected latest non-bot commit; changed files unavailable (merge or shallow history), accepted optimistically"
)
NOTE_FALLBACK = "fallback to most recent commit (no student-work commit detected)"
NOTE_EMPTY = "git log returned no commits"


def resolve_submission_commit(
    provider: RepositoryHistoryProvider,
    config: ClassifierConfig,
    scan_window: int = SCAN_WINDOW,
) -> ResolutionResult:
    """
    Select the commit that represents the student's submission.

    Args:
        provider: Source of commit history and per-commit changed files.
        config: Bot signatures and ignored paths.
        scan_window: Maximum number of recent commits to inspect.

    Returns:
        ResolutionResult. Never raises: unreadable history yields confidence
        "unknown" with the failure recorded in the note.
    """
    try:
        commits = list(provider.list_commits(scan_window))
    except Exception as e:
        logger.warning(f"Commit history unavailable: {e}")
        return ResolutionResult(commit=None, confidence="unknown", note=f"git inspection failed: {e}")

    if not commits:
        return ResolutionResult(commit=None, confidence="unknown", note=NOTE_EMPTY)

    for commit in commits[:scan_window]:
        if looks_like_bot(commit, config):
            logger.debug(f"Skipping bot commit {commit.id[:8]}: {commit.subject}")
            continue

        changed = _changed_files(provider, commit)
        if changed and not touches_student_work(changed, config):
            logger.debug(f"Skipping infrastructure-only commit {commit.id[:8]}")
            continue

        # Without a timestamp the commit cannot date the submission
        if commit.timestamp is None:
            logger.debug(f"Skipping commit {commit.id[:8]} without a timestamp")
            continue

        note = NOTE_RESOLVED if changed else NOTE_RESOLVED_UNKNOWN_FILES
        logger.info(f"Submission commit {commit.id[:8]} @ {commit.iso}")
        return ResolutionResult(commit=commit, confidence="resolved", note=note)

    head = commits[0]
    logger.info(f"No student-work commit in the last {len(commits)} commits, using {head.id[:8]}")
    return ResolutionResult(commit=head, confidence="fallback", note=NOTE_FALLBACK)


def head_commit(provider: RepositoryHistoryProvider) -> CommitRecord | None:
    """Most recent commit, or None if history cannot be read."""
    try:
        commits = provider.list_commits(1)
    except Exception as e:
        logger.warning(f"Could not read HEAD commit: {e}")
        return None
    return commits[0] if commits else None


def _changed_files(provider: RepositoryHistoryProvider, commit: CommitRecord) -> set[str]:
    """Changed files for a commit; any provider failure means unknown (empty)."""
    try:
        return set(provider.changed_files(commit.id))
    except Exception as e:
        logger.debug(f"Changed files unavailable for {commit.id[:8]}: {e}")
        return set()
