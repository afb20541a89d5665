"""Code quality commands."""

import subprocess
import sys

SOURCE_DIRS = ["app/", "cli/", "tests/"]


def _ruff(*args: str) -> int:
    return subprocess.run([sys.executable, "-m", "ruff", *args, *SOURCE_DIRS], check=False).returncode


def main() -> None:
    """Run ruff linter and the format check."""
    sys.exit(_ruff("check") or _ruff("format", "--check"))


def format_code() -> None:
    """Apply ruff fixes and formatting."""
    sys.exit(_ruff("check", "--fix") or _ruff("format"))
