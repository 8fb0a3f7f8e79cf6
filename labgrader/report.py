"""
Feedback and grade artifacts.

Renders the Markdown summary and writes grade.csv and the feedback README.
"""

import csv
import os
from pathlib import Path

from .config import (
    DEFAULT_ARTIFACTS_DIR,
    FEEDBACK_DIRNAME,
    FEEDBACK_FILENAME,
    GRADE_CSV_FILENAME,
    GRADE_CSV_HEADER,
)
from .models import CommitRecord, CompileError, GradeResult, RuntimeFailure, SubmissionStatus, Timeout


STATUS_LEGEND = "0=on time, 1=late, 2=no submission/empty"


def submission_note(grade: GradeResult) -> str:
    submission = grade.submission
    if not submission.exists:
        return "❌ No student source file found in the repository root."
    if submission.is_empty:
        return f"⚠️ Found `{submission.path}` but it appears empty (or only comments)."
    return f"✅ Found `{submission.path}`."


def status_text(grade: GradeResult) -> str:
    commit = grade.resolution.commit
    where = f"(commit: {commit.id if commit else 'unknown'} @ {commit.iso if commit else 'unknown'})"
    if grade.status == SubmissionStatus.NO_SUBMISSION:
        return f"No submission detected (missing/empty code): submission marks = 0/{grade.max_submission_marks}."
    if grade.status == SubmissionStatus.LATE:
        return (
            f"Late submission via latest *student-work* commit: "
            f"{grade.submission_marks}/{grade.max_submission_marks}. {where}"
        )
    return (
        f"On-time submission via latest *student-work* commit: "
        f"{grade.submission_marks}/{grade.max_submission_marks}. {where}"
    )


def _commit_lines(commit: CommitRecord | None) -> list[str]:
    return [
        f"  - SHA: `{commit.id if commit else 'unknown'}`",
        f"  - Author: `{commit.author_name if commit else 'unknown'}` <{commit.author_email if commit else 'unknown'}>",
        f"  - Time (UTC ISO): `{commit.iso if commit else 'unknown'}`",
    ]


def _outcome_notice(grade: GradeResult) -> str:
    outcome = grade.outcome
    if isinstance(outcome, CompileError):
        return (
            "\n---\n⚠️ **SyntaxError: code could not compile.** Dynamic checks were skipped.\n\n"
            f"```\n{outcome.message}\n```\n"
        )
    if isinstance(outcome, RuntimeFailure):
        return f"\n---\n⚠️ **Runtime error detected (best-effort captured):**\n\n```\n{outcome.message}\n```\n"
    if isinstance(outcome, Timeout):
        return "\n---\n⚠️ **Execution timed out** and was stopped.\n"
    return ""


def render_summary(grade: GradeResult) -> str:
    """
    Render the Markdown feedback for a graded repository.

    Args:
        grade: Grading result.

    Returns:
        Markdown text.
    """
    lines = [
        f"# Lab | {grade.lab_name} | Autograding Summary",
        "",
        f"- Student: `{grade.student_id}`",
        f"- {submission_note(grade)}",
        f"- {status_text(grade)}",
        f"- Due: `{grade.deadline_iso}`",
        "",
        "- Repo HEAD commit:",
        *_commit_lines(grade.head_commit),
        "",
        "- Chosen commit for submission timing:",
        *_commit_lines(grade.resolution.commit),
        f"  - Note: {grade.resolution.note}",
        "",
        f"- Status: **{int(grade.status)}** ({STATUS_LEGEND})",
        f"- Run: `{grade.run_at.isoformat()}`",
        "",
        "## Marks Breakdown",
        "",
        "| Item | Marks |",
        "|------|------:|",
    ]
    for task in grade.tasks:
        lines.append(f"| {task.id}: {task.name} | {task.earned}/{task.max} |")
    lines.append(f"| Submission | {grade.submission_marks}/{grade.max_submission_marks} |")
    lines += [
        "",
        "## Total Marks",
        "",
        f"**{grade.total_earned} / {grade.total_marks}**",
        "",
        "## Detailed Feedback",
    ]
    for task in grade.tasks:
        lines += ["", f"### {task.id}: {task.name}"]
        for req in task.requirements:
            if req.ok:
                lines.append(f"- ✅ {req.label}")
            else:
                detail = f" ({req.detail_if_fail})" if req.detail_if_fail else ""
                lines.append(f"- ❌ {req.label}{detail}")

    return "\n".join(lines) + "\n" + _outcome_notice(grade)


def write_grade_csv(grade: GradeResult, csv_path: Path) -> None:
    """
    Save the one-row grade CSV. The header is fixed; gradebook imports depend on it.
    """
    with open(csv_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f, lineterminator="\n")
        writer.writerow(GRADE_CSV_HEADER)
        writer.writerow([grade.student_id, grade.total_earned, grade.total_marks, int(grade.status)])


def write_artifacts(grade: GradeResult, artifacts_dir: Path | None = None) -> dict[str, Path]:
    """
    Write grade.csv and the feedback README, and append the summary to the
    GitHub Actions step summary when GITHUB_STEP_SUMMARY is set.

    Returns:
        Dictionary of output file paths.
    """
    artifacts_dir = artifacts_dir or DEFAULT_ARTIFACTS_DIR
    feedback_dir = artifacts_dir / FEEDBACK_DIRNAME
    feedback_dir.mkdir(parents=True, exist_ok=True)

    summary = render_summary(grade)
    output_files: dict[str, Path] = {}

    csv_path = artifacts_dir / GRADE_CSV_FILENAME
    write_grade_csv(grade, csv_path)
    output_files["grade_csv"] = csv_path

    feedback_path = feedback_dir / FEEDBACK_FILENAME
    feedback_path.write_text(summary, encoding="utf-8")
    output_files["feedback"] = feedback_path

    step_summary = os.environ.get("GITHUB_STEP_SUMMARY")
    if step_summary:
        with open(step_summary, "a", encoding="utf-8") as f:
            f.write(summary)
        output_files["step_summary"] = Path(step_summary)

    return output_files
