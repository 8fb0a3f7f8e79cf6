"""End-to-end tests of the grading pipeline on throwaway repositories."""

from pathlib import Path

import pytest

from labgrader.config_loader import GraderConfig
from labgrader.models import GradingTask, RuntimeFailure, SubmissionStatus, Success
from main import run_grading_pipeline

# 2023-11-14T22:13:20Z
DEADLINE_SECONDS = 1_700_000_000
TASKS = [GradingTask(id="TODO 1", name="Warm-up", marks=80)]


@pytest.fixture
def make_config():
    def _make(repo_path, **overrides):
        values = dict(
            lab_name="lab-5",
            deadline="2023-11-14T22:13:20+00:00",
            repo_path=Path(repo_path),
            tasks=TASKS,
            sandbox_timeout_ms=10_000,
        )
        values.update(overrides)
        return GraderConfig(**values)

    return _make


def test_on_time_submission_despite_later_grader_commit(temp_git_repo, commit_files, make_config):
    commit_files(temp_git_repo, {"answers.py": "print('hello', 'world')\n"}, "Finish lab", DEADLINE_SECONDS)
    commit_files(temp_git_repo, {"artifacts/grade.csv": "x\n"}, "Record grade", DEADLINE_SECONDS + 3600)

    grade = run_grading_pipeline(make_config(temp_git_repo.working_dir), env={"STUDENT_USERNAME": "sara"})

    assert grade.student_id == "sara"
    assert grade.status == SubmissionStatus.ON_TIME
    assert grade.late is False
    assert grade.resolution.confidence == "resolved"
    assert grade.head_commit.subject == "Record grade"
    assert grade.outcome == Success(logs=("hello world",))
    assert grade.total_earned == 100


def test_late_submission(temp_git_repo, commit_files, make_config):
    commit_files(temp_git_repo, {"answers.py": "x = undefined_name\n"}, "Late work", DEADLINE_SECONDS + 1)

    grade = run_grading_pipeline(make_config(temp_git_repo.working_dir), env={})

    assert grade.status == SubmissionStatus.LATE
    assert grade.submission_marks == 10
    assert grade.total_earned == 90
    assert isinstance(grade.outcome, RuntimeFailure)


def test_empty_submission_skips_sandbox(temp_git_repo, commit_files, make_config):
    commit_files(temp_git_repo, {"answers.py": "# write your code here\n"}, "Start", DEADLINE_SECONDS + 99)

    grade = run_grading_pipeline(make_config(temp_git_repo.working_dir), env={})

    assert grade.status == SubmissionStatus.NO_SUBMISSION
    assert grade.late is False
    assert grade.outcome is None
    assert grade.total_earned == 0


def test_repository_without_history_is_never_late(tmp_path, make_config):
    (tmp_path / "answers.py").write_text("print('no git here')\n")

    grade = run_grading_pipeline(make_config(tmp_path), env={})

    assert grade.resolution.confidence == "unknown"
    assert grade.head_commit is None
    assert grade.status == SubmissionStatus.ON_TIME
