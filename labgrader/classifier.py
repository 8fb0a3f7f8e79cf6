"""
Commit classification predicates used by the provenance resolver.
"""

from .models import ClassifierConfig, CommitRecord


def commit_haystack(commit: CommitRecord) -> str:
    """Lower-cased text searched for bot signatures."""
    return f"{commit.author_name} {commit.author_email} {commit.subject}".lower()


def looks_like_bot(commit: CommitRecord, config: ClassifierConfig) -> bool:
    """
    Check whether a commit was made by automation rather than the student.

    Args:
        commit: Commit to classify.
        config: Classifier rules; signatures are already lower-cased.

    Returns:
        True if any bot signature occurs in the author name, email or subject.
    """
    hay = commit_haystack(commit)
    return any(signature in hay for signature in config.bot_signatures)


def is_ignored_path(path: str, config: ClassifierConfig) -> bool:
    """
    Check whether a changed path belongs to grading infrastructure.

    Empty paths count as ignored.
    """
    if not path:
        return True
    if path in config.ignored_exact_paths:
        return True
    return any(path.startswith(prefix) for prefix in config.ignored_path_prefixes)


def touches_student_work(paths: set[str], config: ClassifierConfig) -> bool:
    """True if at least one path is not ignored."""
    return any(not is_ignored_path(p, config) for p in paths)
