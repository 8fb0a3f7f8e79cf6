"""Tests for scoring and the feedback artifacts."""

import pytest

from labgrader.models import (
    CommitRecord,
    CompileError,
    GradeResult,
    GradingTask,
    ResolutionResult,
    SubmissionFile,
    SubmissionStatus,
    Success,
    Timeout,
)
from labgrader.report import render_summary, write_artifacts
from labgrader.scoring import classify_status, score_tasks, submission_marks, total_marks


TASKS = [GradingTask(id="TODO 1", name="Classes", marks=40), GradingTask(id="TODO 2", name="Loops", marks=40)]
CODE = SubmissionFile(path="answers.py", source="print('hello world')\n", is_empty=False)


def make_grade(status=SubmissionStatus.ON_TIME, outcome=None, submission=CODE) -> GradeResult:
    commit = CommitRecord(id="abc123", timestamp=1_700_000_000_000, author_name="Sara", author_email="s@x.edu")
    tasks = score_tasks(TASKS, status)
    marks = submission_marks(status)
    return GradeResult(
        student_id="sara",
        lab_name="lab-5",
        status=status,
        submission=submission,
        resolution=ResolutionResult(commit=commit, confidence="resolved", note="picked"),
        head_commit=commit,
        deadline_iso="2025-11-03T23:59:00+03:00",
        late=status == SubmissionStatus.LATE,
        outcome=outcome,
        tasks=tasks,
        submission_marks=marks,
        max_submission_marks=20,
        total_earned=total_marks(tasks, marks, 100),
        total_marks=100,
    )


@pytest.mark.parametrize(
    "submission,late,expected",
    [
        (CODE, False, SubmissionStatus.ON_TIME),
        (CODE, True, SubmissionStatus.LATE),
        (SubmissionFile(path="answers.py", source="# todo", is_empty=True), True, SubmissionStatus.NO_SUBMISSION),
        (SubmissionFile(), False, SubmissionStatus.NO_SUBMISSION),
    ],
)
def test_classify_status(submission, late, expected):
    assert classify_status(submission, late) == expected


def test_marks():
    assert submission_marks(SubmissionStatus.ON_TIME) == 20
    assert submission_marks(SubmissionStatus.LATE) == 10
    assert submission_marks(SubmissionStatus.NO_SUBMISSION) == 0

    assert [t.earned for t in score_tasks(TASKS, SubmissionStatus.LATE)] == [40, 40]
    assert [t.earned for t in score_tasks(TASKS, SubmissionStatus.NO_SUBMISSION)] == [0, 0]
    assert total_marks(score_tasks(TASKS, SubmissionStatus.ON_TIME), 20, 90) == 90


def test_summary_contents():
    summary = render_summary(make_grade(outcome=Success(logs=("hi",))))

    assert summary.startswith("# Lab | lab-5 | Autograding Summary")
    assert "On-time submission via latest *student-work* commit: 20/20." in summary
    assert "| TODO 1: Classes | 40/40 |" in summary
    assert "| Submission | 20/20 |" in summary
    assert "**100 / 100**" in summary
    assert "- Note: picked" in summary
    assert "2023-11-14T22:13:20Z" in summary
    assert "⚠️" not in summary


def test_summary_reports_sandbox_problems():
    assert "could not compile" in render_summary(make_grade(outcome=CompileError(message="SyntaxError: bad")))
    assert "timed out" in render_summary(make_grade(outcome=Timeout()))


def test_summary_for_missing_submission():
    grade = make_grade(status=SubmissionStatus.NO_SUBMISSION, submission=SubmissionFile())
    summary = render_summary(grade)

    assert "No submission detected" in summary
    assert "No student source file found" in summary
    assert "**0 / 100**" in summary


def test_write_artifacts(tmp_path, monkeypatch):
    step_summary = tmp_path / "step.md"
    monkeypatch.setenv("GITHUB_STEP_SUMMARY", str(step_summary))

    outputs = write_artifacts(make_grade(status=SubmissionStatus.LATE), tmp_path / "artifacts")

    assert outputs["grade_csv"].read_text() == (
        "student_username,obtained_marks,total_marks,status\nsara,90,100,1\n"
    )
    assert outputs["feedback"] == tmp_path / "artifacts" / "feedback" / "README.md"
    assert step_summary.read_text(encoding="utf-8") == outputs["feedback"].read_text(encoding="utf-8")


def test_write_artifacts_without_step_summary(tmp_path, monkeypatch):
    monkeypatch.delenv("GITHUB_STEP_SUMMARY", raising=False)
    outputs = write_artifacts(make_grade(), tmp_path / "out")
    assert "step_summary" not in outputs
