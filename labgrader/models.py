"""
Pydantic models for the lab grader.

Defines the commit and classifier types consumed by the provenance resolver,
the tagged sandbox outcome, and the grading result handed to the report layer.
"""

from datetime import datetime, timezone
from enum import IntEnum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CommitRecord(BaseModel):
    """
    One commit summary read from repository history.

    Attributes:
        id: Opaque commit handle (the SHA for git).
        timestamp: Commit time in epoch milliseconds, or None when unknown.
        author_name: Author display name.
        author_email: Author email address.
        subject: First line of the commit message.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Opaque commit handle")
    timestamp: int | None = Field(default=None, description="Epoch milliseconds")
    author_name: str = Field(default="", description="Author display name")
    author_email: str = Field(default="", description="Author email")
    subject: str = Field(default="", description="Commit subject line")

    @property
    def iso(self) -> str:
        """UTC ISO-8601 rendering of the timestamp, or "unknown"."""
        if self.timestamp is None:
            return "unknown"
        moment = datetime.fromtimestamp(self.timestamp / 1000, tz=timezone.utc)
        return moment.isoformat().replace("+00:00", "Z")


class ClassifierConfig(BaseModel):
    """
    Immutable rules for telling automation commits and infrastructure paths apart
    from student work.

    Bot signatures are stored lower-cased so matching is case-insensitive.
    """

    model_config = ConfigDict(frozen=True)

    bot_signatures: frozenset[str] = Field(default_factory=frozenset)
    ignored_exact_paths: frozenset[str] = Field(default_factory=frozenset)
    ignored_path_prefixes: frozenset[str] = Field(default_factory=frozenset)

    @field_validator("bot_signatures", mode="before")
    @classmethod
    def _lower_signatures(cls, value):
        return frozenset(s.lower() for s in value if s)

    @field_validator("ignored_path_prefixes", mode="before")
    @classmethod
    def _drop_empty_prefixes(cls, value):
        # An empty prefix would ignore every path
        return frozenset(p for p in value if p)

    @classmethod
    def build(
        cls,
        bot_signatures: list[str] | tuple[str, ...] = (),
        ignored_exact_paths: list[str] | tuple[str, ...] = (),
        ignored_path_prefixes: list[str] | tuple[str, ...] = (),
    ) -> "ClassifierConfig":
        return cls(
            bot_signatures=frozenset(bot_signatures),
            ignored_exact_paths=frozenset(ignored_exact_paths),
            ignored_path_prefixes=frozenset(ignored_path_prefixes),
        )


Confidence = Literal["resolved", "fallback", "unknown"]


class ResolutionResult(BaseModel):
    """
    The commit chosen as the student's submission instant.

    Attributes:
        commit: Selected commit, or None when history was unavailable.
        confidence: "resolved" for a qualifying student commit, "fallback" for
            the most recent commit when none qualified, "unknown" without history.
        note: Human-readable explanation of how the commit was chosen.
    """

    model_config = ConfigDict(frozen=True)

    commit: CommitRecord | None = Field(default=None)
    confidence: Confidence = Field(...)
    note: str = Field(default="")

    @property
    def timestamp(self) -> int | None:
        return self.commit.timestamp if self.commit else None


class CompileError(BaseModel):
    """Submitted code did not compile; execution never ran."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["compile_error"] = "compile_error"
    message: str


class Timeout(BaseModel):
    """Execution exceeded the wall-clock budget and was killed."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["timeout"] = "timeout"


class RuntimeFailure(BaseModel):
    """Execution raised an error inside the sandbox."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["runtime_error"] = "runtime_error"
    message: str


class Success(BaseModel):
    """Execution finished within budget; logs holds every captured print call."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["success"] = "success"
    logs: tuple[str, ...] = ()


SandboxOutcome = Annotated[
    Union[CompileError, Timeout, RuntimeFailure, Success],
    Field(discriminator="kind"),
]


class SubmissionStatus(IntEnum):
    """Status codes written to grade.csv."""

    ON_TIME = 0
    LATE = 1
    NO_SUBMISSION = 2


class GradingTask(BaseModel):
    """A graded task from the lab configuration."""

    id: str = Field(..., description="Short task label, e.g. 'TODO 1'")
    name: str = Field(..., description="Task description")
    marks: int = Field(..., ge=0, description="Maximum marks")


class Requirement(BaseModel):
    """A single checklist line in the task feedback."""

    label: str
    ok: bool
    detail_if_fail: str = ""


class TaskResult(BaseModel):
    """
    Marks awarded for one task.

    Attributes:
        id: Task label.
        name: Task description.
        earned: Marks awarded.
        max: Maximum marks.
        requirements: Checklist shown in the feedback.
    """

    id: str
    name: str
    earned: int = Field(..., ge=0)
    max: int = Field(..., ge=0)
    requirements: list[Requirement] = Field(default_factory=list)


class SubmissionFile(BaseModel):
    """
    The located student source file.

    Attributes:
        path: Path relative to the repository root, or None if nothing was found.
        source: File contents ("" when missing or unreadable).
        is_empty: Whether the emptiness pre-check classified the source as empty.
    """

    path: str | None = None
    source: str = ""
    is_empty: bool = True

    @property
    def exists(self) -> bool:
        return self.path is not None


class GradeResult(BaseModel):
    """
    Complete grading result for one student repository.

    Attributes:
        student_id: Student username.
        lab_name: Lab identifier shown in the report.
        status: Submission status code.
        submission: Located submission file.
        resolution: Provenance resolution for the submission instant.
        head_commit: Repository HEAD, for the report.
        deadline_iso: Deadline as configured.
        late: Lateness verdict.
        outcome: Sandbox outcome, or None when the sandbox did not run.
        tasks: Per-task results.
        submission_marks: Marks for the submission itself.
        max_submission_marks: Maximum submission marks.
        total_earned: Total marks (capped).
        total_marks: Maximum total marks.
        run_at: When grading ran.
    """

    student_id: str
    lab_name: str
    status: SubmissionStatus
    submission: SubmissionFile
    resolution: ResolutionResult
    head_commit: CommitRecord | None = None
    deadline_iso: str
    late: bool
    outcome: SandboxOutcome | None = None
    tasks: list[TaskResult] = Field(default_factory=list)
    submission_marks: int = Field(..., ge=0)
    max_submission_marks: int = Field(..., ge=0)
    total_earned: int = Field(..., ge=0)
    total_marks: int = Field(..., ge=0)
    run_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
