"""
Locating the student and their submitted source file.
"""

from pathlib import Path
from typing import Mapping

from loguru import logger

from .config import EXCLUDED_SUBMISSION_FILES, SUBMISSION_CANDIDATES, SUBMISSION_EXTENSION
from .models import SubmissionFile
from .sandbox import is_empty_code


def resolve_student_id(env: Mapping[str, str], override: str | None = None) -> str:
    """
    Work out the student's username.

    Priority: explicit override, STUDENT_USERNAME, the suffix after the last
    '-' of the repository name in GITHUB_REPOSITORY (classroom repos are named
    '<assignment>-<username>'), GITHUB_ACTOR, the repository name, "student".
    """
    if override:
        return override

    repo_full = env.get("GITHUB_REPOSITORY", "")
    repo_name = repo_full.split("/")[1] if "/" in repo_full else repo_full
    from_repo_suffix = repo_name.split("-")[-1] if "-" in repo_name else ""

    return (
        env.get("STUDENT_USERNAME")
        or from_repo_suffix
        or env.get("GITHUB_ACTOR")
        or repo_name
        or "student"
    )


def read_text_safe(path: Path) -> str:
    """Read a text file, returning "" if it cannot be read."""
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return ""


def find_submission_file(repo_path: Path, candidates: list[str] | None = None) -> Path | None:
    """
    Find the student's source file in the repository root.

    Args:
        repo_path: Repository working tree.
        candidates: Preferred file names, checked in order.

    Returns:
        Path to the file, or None if nothing suitable exists.
    """
    for name in candidates or SUBMISSION_CANDIDATES:
        path = repo_path / name
        if path.is_file():
            return path

    if not repo_path.is_dir():
        return None

    # Any other source file that is not grader, test or packaging code
    for path in sorted(repo_path.iterdir()):
        if not path.is_file() or path.suffix.lower() != SUBMISSION_EXTENSION:
            continue
        if path.name in EXCLUDED_SUBMISSION_FILES or path.name.startswith("test_"):
            continue
        return path

    return None


def load_submission(repo_path: Path, candidates: list[str] | None = None) -> SubmissionFile:
    """Locate, read and run the emptiness pre-check on the submission."""
    path = find_submission_file(repo_path, candidates)
    if path is None:
        logger.info(f"No submission file found in {repo_path}")
        return SubmissionFile()

    source = read_text_safe(path)
    empty = is_empty_code(source)
    logger.info(f"Submission file {path.name} ({'empty' if empty else f'{len(source)} chars'})")
    return SubmissionFile(path=path.relative_to(repo_path).as_posix(), source=source, is_empty=empty)
