import os
import sys
from pathlib import Path
from typing import Any, Callable, Iterator

import pytest


pytest_plugins = [
    "tests.fixtures.janitor_env",
]

# Ensure 'shared' layer is importable at collection time (module import stage)
_repo_root = Path(__file__).resolve().parents[1]
# Ensure project root and 'src' are on sys.path for flexible imports
_repo_root_str = str(_repo_root)
_src_path_str = str(_repo_root / "src")
if _repo_root_str not in sys.path:
    sys.path.insert(0, _repo_root_str)
if _src_path_str not in sys.path:
    sys.path.insert(0, _src_path_str)
_shared_path = _repo_root / "src" / "lambda" / "layers" / "common" / "python"
_shared_str = str(_shared_path)
if _shared_str not in sys.path:
    sys.path.insert(0, _shared_str)


@pytest.fixture(autouse=True)
def aws_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Ensure default AWS region is set for moto/boto3 clients and clear cross-test env leaks."""
    monkeypatch.setenv("AWS_REGION", os.environ.get("AWS_REGION", "us-east-1"))
    monkeypatch.setenv("AWS_DEFAULT_REGION", os.environ.get("AWS_DEFAULT_REGION", "us-east-1"))
    # Provide dummy credentials so botocore signing doesn't fail under moto
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")

    # Handler settings are read per invocation; start every test from a clean slate
    for key in (
        "DELETION_QUEUE_ARN",
        "SCHEDULER_ROLE_ARN",
        "DELETION_DELAY_DAYS",
        "SCHEDULE_WINDOW_MINUTES",
        "SLACK_WEBHOOK_PARAM_NAME",
        "WEBHOOK_CACHE_SECONDS",
        "APP_NAME",
        "LOG_EVENT",
    ):
        monkeypatch.delenv(key, raising=False)
    yield


@pytest.fixture
def load_module() -> Callable[[str], dict[str, Any]]:
    import runpy

    def _apply(path: str) -> dict[str, Any]:
        return runpy.run_path(path)

    return _apply


@pytest.fixture
def handler_globals(load_module) -> Callable[[str], dict[str, Any]]:
    """Load a handler and return the globals its ``main`` actually reads.

    ``runpy.run_path`` hands back a copy of the module namespace, so module
    level clients have to be swapped through ``main.__globals__``.
    """

    def _apply(path: str) -> dict[str, Any]:
        mod = load_module(path)
        return mod["main"].__globals__

    return _apply


def pytest_configure(config):
    """Configure pytest with essential markers."""
    config.addinivalue_line("markers", "unit: unit test")
    config.addinivalue_line("markers", "infrastructure: CDK template test")
    config.addinivalue_line("markers", "handlers: Lambda entry point test")


def pytest_collection_modifyitems(config, items):
    """Add markers based on file location."""
    rootdir = Path(config.rootdir)

    for item in items:
        rel_path = Path(item.fspath).relative_to(rootdir)

        if "unit" in rel_path.parts:
            item.add_marker(pytest.mark.unit)
        if "infrastructure" in rel_path.parts:
            item.add_marker(pytest.mark.infrastructure)
        if "lambda" in rel_path.parts:
            item.add_marker(pytest.mark.handlers)
