"""Test runner commands."""

import subprocess
import sys


def _pytest(*args: str) -> None:
    command = [sys.executable, "-m", "pytest", *args, "--tb=short"]
    sys.exit(subprocess.run(command, check=False).returncode)


def main() -> None:
    """Run unit tests."""
    _pytest("tests/unit", "-m", "unit")


def test_smoke() -> None:
    """Run API smoke tests against a temporary data directory."""
    _pytest("tests/smoke", "-v")


def test_all() -> None:
    """Run every test suite."""
    _pytest("tests/")
