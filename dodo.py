"""
Doit file to wrap development workflow commands.
"""

import shutil
from pathlib import Path

from doit.task import Task
from doit.tools import create_folder

PACKAGE = "nodesync"

# artifact output
OUT_PATH = Path("__out__")

# test coverage results
COV_PATH = OUT_PATH / "test" / "cov"
COV_HTML_PATH = COV_PATH / "html"


def cleanup_dir(output_dir: Path):
    if output_dir.exists():
        shutil.rmtree(output_dir)


def task_pytest() -> Task:
    """
    Run pytest against the in-memory namespace and report coverage.
    """

    args = [
        "pytest",
        f"--cov={PACKAGE}",
        "--cov-report=term-missing",
        f"--cov-report=html:{COV_HTML_PATH}",
    ]

    return Task(
        "test",
        actions=[
            (create_folder, [COV_PATH]),
            " ".join(args),
        ],
        targets=[f"{COV_HTML_PATH}/index.html"],
        file_dep=[],
        clean=[(cleanup_dir, [COV_PATH])],
    )


def task_format() -> Task:
    """
    Run formatters on package and tests.
    """

    targets = [PACKAGE, "test", "dodo.py"]

    return Task(
        "format",
        actions=[
            " ".join(
                [
                    "autoflake",
                    "--remove-all-unused-imports",
                    "-i",
                    "-r",
                    *targets,
                ]
            ),
            " ".join(["isort", *targets]),
            " ".join(["black", *targets]),
        ],
        targets=[],
        file_dep=[],
    )
