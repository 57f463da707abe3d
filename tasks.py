"""Invoke tasks for the payload optimizer."""

from __future__ import annotations

import pathlib
import subprocess
from typing import Sequence

from invoke import task

ROOT = pathlib.Path(__file__).parent.resolve()
REPORTS = ROOT / "reports"


def _sh(*argv: str) -> None:
    subprocess.run(list(argv), check=True, cwd=ROOT)


@task
def tests(_context, fastmcp=True):
    """Run the unit suite, plus the MCP tool suite unless --no-fastmcp."""
    targets: Sequence[str] = ["tests/unit", "tests/fastmcp"] if fastmcp else ["tests/unit"]
    _sh("pytest", *targets)


@task
def coverage(_context):
    """Run all tests under coverage and write terminal and XML reports."""
    REPORTS.mkdir(exist_ok=True)
    _sh("coverage", "run", "--source=payloadopt", "-m", "pytest", "tests")
    _sh("coverage", "report", "-m")
    _sh("coverage", "xml", "-o", str(REPORTS / "coverage.xml"))


@task
def serve(_context, transport="stdio", port=8000):
    """Start the MCP server, e.g. ``invoke serve --transport http``."""
    argv = ["payloadopt", "--transport", transport]
    if transport != "stdio":
        argv += ["--port", str(port)]
    _sh(*argv)


@task
def build(_context):
    """Build sdist and wheel into dist/."""
    _sh("python", "-m", "build")
