"""Shared fixtures for nsautoload tests."""

import sys
from pathlib import Path

import pytest

# Make the nsautoload package importable without installing it
sys.path.insert(0, str(Path(__file__).parent.parent))

from nsautoload import loading  # noqa: E402
from nsautoload.errors import HookRegistrationError  # noqa: E402

# Top-level names the tests load modules under; cleared from sys.modules after each test
TEST_ROOTS = ("Acme", "Foo", "Vendor")


class FakeHost:
    """In-memory HookHost recording registrations."""

    def __init__(self, reject: str | None = None):
        self.reject = reject
        self.registered = []

    def register(self, callback, *, packages=None):
        if self.reject is not None:
            raise HookRegistrationError(callback, self.reject)
        self.registered.append((callback, packages))


@pytest.fixture
def fake_host():
    return FakeHost()


@pytest.fixture
def rejecting_host():
    return FakeHost(reject="host is read-only")


@pytest.fixture(autouse=True)
def clean_test_modules():
    """Drop modules loaded under the test roots so every test starts fresh."""
    yield
    for name in list(sys.modules):
        if name.split(".", 1)[0] in TEST_ROOTS:
            del sys.modules[name]


@pytest.fixture(autouse=True)
def fresh_default_loader(monkeypatch):
    """Start every test with an empty process-wide loader."""
    monkeypatch.setattr(loading, "_default_loader", None)


@pytest.fixture
def isolated_meta_path(monkeypatch):
    """Give the test its own copy of sys.meta_path."""
    meta_path = list(sys.meta_path)
    monkeypatch.setattr(sys, "meta_path", meta_path)
    return meta_path


@pytest.fixture
def runs_log(tmp_path):
    """File each generated module appends its name to when executed."""
    return tmp_path / "runs.log"


@pytest.fixture
def make_module(runs_log):
    """Factory writing a module that records each execution in runs_log."""

    def _make(path: Path, body: str = "") -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            f"with open({str(runs_log)!r}, 'a') as _log:\n"
            f"    _log.write(__name__ + '\\n')\n"
            f"{body}\n"
        )
        return path

    return _make


@pytest.fixture
def read_runs(runs_log):
    """Return the module names executed so far, in order."""

    def _read() -> list[str]:
        if not runs_log.exists():
            return []
        return runs_log.read_text().splitlines()

    return _read
