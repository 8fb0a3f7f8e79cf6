"""
Lab grader: submission timing and runnability for one student repository

Usage:
  main.py [--config=PATH] [--repo=PATH]
  main.py (-h | --help)

Options:
  --config=PATH  Path to YAML configuration file [default: grader_config.yml].
  --repo=PATH    Student repository to grade (overrides repo_path from the config).
  -h --help      Show this screen.
"""

import os
import sys
from pathlib import Path
from typing import Mapping

from docopt import docopt
from loguru import logger

from labgrader.config import DEFAULT_ARTIFACTS_DIR
from labgrader.config_loader import GraderConfig, load_config
from labgrader.history import GitHistoryProvider, RepositoryHistoryProvider
from labgrader.lateness import is_late
from labgrader.models import GradeResult, SandboxOutcome, SubmissionStatus
from labgrader.provenance import head_commit, resolve_submission_commit
from labgrader.report import write_artifacts
from labgrader.sandbox import SandboxEvaluator
from labgrader.scoring import classify_status, score_tasks, submission_marks, total_marks
from labgrader.submission import load_submission, resolve_student_id


def configure_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "INFO")


def run_grading_pipeline(
    config: GraderConfig,
    env: Mapping[str, str] | None = None,
    provider: RepositoryHistoryProvider | None = None,
    evaluator: SandboxEvaluator | None = None,
) -> GradeResult:
    """
    Grade one student repository.

    Resolves the submission commit and lateness, locates and sandbox-evaluates
    the submitted code, and computes marks.

    Args:
        config: Loaded grader configuration.
        env: Environment used to detect the student id. Defaults to os.environ.
        provider: History provider. Defaults to git on config.repo_path.
        evaluator: Sandbox evaluator. Defaults to one built from config.

    Returns:
        GradeResult for the repository.
    """
    env = os.environ if env is None else env
    repo_path = config.repo_path
    provider = provider or GitHistoryProvider(repo_path)
    evaluator = evaluator or SandboxEvaluator(
        timeout_ms=config.sandbox_timeout_ms,
        memory_limit_mb=config.sandbox_memory_limit_mb,
        allowed_modules=config.allowed_modules,
    )

    student_id = resolve_student_id(env, config.student_id)
    logger.info(f"Grading {student_id} in {repo_path}")

    submission = load_submission(repo_path, config.submission_candidates)

    resolution = resolve_submission_commit(provider, config.classifier_config(), config.scan_window)
    has_code = submission.exists and not submission.is_empty
    late = is_late(resolution.timestamp, config.deadline_epoch_ms) if has_code else False
    status = classify_status(submission, late)

    outcome: SandboxOutcome | None = None
    if has_code:
        outcome = evaluator.evaluate(submission.source)
        logger.info(f"Sandbox outcome: {outcome.kind}")

    tasks = score_tasks(config.tasks, status)
    marks = submission_marks(status, config.submission_marks_on_time, config.submission_marks_late)

    return GradeResult(
        student_id=student_id,
        lab_name=config.lab_name,
        status=status,
        submission=submission,
        resolution=resolution,
        head_commit=head_commit(provider),
        deadline_iso=config.deadline.isoformat(),
        late=late,
        outcome=outcome,
        tasks=tasks,
        submission_marks=marks,
        max_submission_marks=config.submission_marks_on_time,
        total_earned=total_marks(tasks, marks, config.total_marks),
        total_marks=config.total_marks,
    )


def print_grade_summary(grade: GradeResult) -> None:
    """
    Print a summary of the grade to console.

    Args:
        grade: GradeResult to summarize.
    """
    commit = grade.resolution.commit
    print(f"\n  {'='*50}")
    print(f"  Student: {grade.student_id}")
    print(f"  Submission file: {grade.submission.path or 'not found'}")
    print(f"  Commit: {commit.id[:8] if commit else 'unknown'} ({grade.resolution.confidence})")
    print(f"  Status: {int(grade.status)} ({SubmissionStatus(grade.status).name.lower()})")
    print(f"  Sandbox: {grade.outcome.kind if grade.outcome else 'skipped'}")
    print(f"  {'='*50}")

    for task in grade.tasks:
        print(f"  [{'+' if task.earned else '-'}] {task.id}: {task.earned}/{task.max}")

    print()


def main() -> int:
    """
    Main CLI entrypoint.

    Returns:
        Exit code (0 for success, 1 for error).
    """
    arguments = docopt(__doc__)
    config_path = Path(arguments["--config"])

    if not config_path.exists():
        print(f"Error: Configuration file not found at {config_path}")
        return 1

    try:
        config = load_config(config_path)
        print(f"Loaded configuration from {config_path}")
    except Exception as e:
        print(f"Error loading config: {e}")
        return 1

    if arguments["--repo"]:
        config = config.model_copy(update={"repo_path": Path(arguments["--repo"])})

    configure_logging(config.verbose)

    if not config.repo_path.is_dir():
        print(f"Error: Repository not found: {config.repo_path}")
        return 1

    try:
        grade = run_grading_pipeline(config)
        output_files = write_artifacts(grade, config.artifacts_dir or config.repo_path / DEFAULT_ARTIFACTS_DIR)
    except KeyboardInterrupt:
        print("\nGrading interrupted by user.")
        return 1
    except Exception as e:
        print(f"\nError: {e}")
        if config.verbose:
            import traceback
            traceback.print_exc()
        return 1

    print_grade_summary(grade)
    print(f"  Grade CSV: {output_files['grade_csv']}")
    print(f"  Feedback:  {output_files['feedback']}")
    print(f"✔ Lab graded: {grade.total_earned}/{grade.total_marks} (status={int(grade.status)})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
