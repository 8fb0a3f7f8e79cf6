"""
Configuration constants for the lab grader.

Every value here is a default; grader_config.yml can override it.
"""

from pathlib import Path


DEFAULT_CONFIG_FILENAME: str = "grader_config.yml"

# History scanning
SCAN_WINDOW: int = 800

# Automation signatures, matched case-insensitively against
# "<author name> <author email> <subject>"
BOT_SIGNATURES: list[str] = [
    "[bot]",
    "github-actions",
    "actions@github.com",
    "github classroom",
    "classroom[bot]",
    "dependabot",
    "autograding",
    "workflow",
    "grader",
    "autograder",
]

# Grading infrastructure, never student work
IGNORED_PATH_PREFIXES: list[str] = [
    ".github/workflows/",
    "artifacts/",
    ".venv/",
    "__pycache__/",
]
IGNORED_PATHS_EXACT: list[str] = [
    "grade.py",
    "grade.yml",
    "grader_config.yml",
    "requirements.txt",
    "pyproject.toml",
    ".gitignore",
]

# Sandbox execution
SANDBOX_TIMEOUT_MS: int = 800
SANDBOX_MEMORY_LIMIT_MB: int = 256
SANDBOX_ALLOWED_MODULES: list[str] = ["math"]
SANDBOX_FILENAME: str = "<submission>"
SANDBOX_RESULT_MARKER: str = "__LABGRADER_RESULT__"

# Emptiness pre-check
EMPTY_CODE_MIN_CHARS: int = 10

# Submission discovery
SUBMISSION_CANDIDATES: list[str] = ["answers.py", "solution.py", "main.py", "app.py"]
SUBMISSION_EXTENSION: str = ".py"
EXCLUDED_SUBMISSION_FILES: list[str] = ["grade.py", "setup.py", "conftest.py", "noxfile.py"]

# Marks
TOTAL_MARKS: int = 100
SUBMISSION_MARKS_ON_TIME: int = 20
SUBMISSION_MARKS_LATE: int = 10

# Output artifacts
DEFAULT_ARTIFACTS_DIR: Path = Path("artifacts")
FEEDBACK_DIRNAME: str = "feedback"
FEEDBACK_FILENAME: str = "README.md"
GRADE_CSV_FILENAME: str = "grade.csv"
GRADE_CSV_HEADER: list[str] = ["student_username", "obtained_marks", "total_marks", "status"]
