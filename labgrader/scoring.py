"""
Submission status and mark arithmetic.
"""

from .config import SUBMISSION_MARKS_LATE, SUBMISSION_MARKS_ON_TIME
from .models import GradingTask, Requirement, SubmissionFile, SubmissionStatus, TaskResult


def classify_status(submission: SubmissionFile, late: bool) -> SubmissionStatus:
    """Missing or empty code is NO_SUBMISSION regardless of timing."""
    if not submission.exists or submission.is_empty:
        return SubmissionStatus.NO_SUBMISSION
    return SubmissionStatus.LATE if late else SubmissionStatus.ON_TIME


def submission_marks(
    status: SubmissionStatus,
    on_time: int = SUBMISSION_MARKS_ON_TIME,
    late: int = SUBMISSION_MARKS_LATE,
) -> int:
    if status == SubmissionStatus.NO_SUBMISSION:
        return 0
    return late if status == SubmissionStatus.LATE else on_time


def score_tasks(tasks: list[GradingTask], status: SubmissionStatus) -> list[TaskResult]:
    """
    Award task marks.

    Every task gets full marks when a submission exists and zero otherwise.
    """
    results: list[TaskResult] = []
    for task in tasks:
        if status == SubmissionStatus.NO_SUBMISSION:
            requirement = Requirement(label="No submission / empty code: cannot grade tasks", ok=False)
            earned = 0
        else:
            requirement = Requirement(label="Completed", ok=True)
            earned = task.marks
        results.append(
            TaskResult(id=task.id, name=task.name, earned=earned, max=task.marks, requirements=[requirement])
        )
    return results


def total_marks(task_results: list[TaskResult], marks_for_submission: int, cap: int) -> int:
    return min(sum(t.earned for t in task_results) + marks_for_submission, cap)
