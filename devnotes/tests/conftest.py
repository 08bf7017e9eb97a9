"""
Pytest configuration for DevNotes backend tests.

Why: Force AnyIO to use the asyncio backend, make the repo root importable,
and give every test a clean, deterministic environment (no real provider or
repository configuration leaks in from the developer's shell).
"""
import sys
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).resolve().parents[2]
TESTS_DIR = REPO_ROOT / "devnotes" / "tests"
for p in (str(REPO_ROOT), str(TESTS_DIR)):
    if p not in sys.path:
        sys.path.insert(0, p)


_ENV_VARS = (
    "DEVNOTES_ENV",
    "DEVNOTES_TRUST_PROXY",
    "PROVIDER_CLIENT_ID",
    "PROVIDER_CLIENT_SECRET",
    "GITHUB_CLIENT_ID",
    "GITHUB_CLIENT_SECRET",
    "PROVIDER_SCOPE",
    "PROVIDER_AUTHORIZE_URL",
    "PROVIDER_TOKEN_URL",
    "PROVIDER_API_URL",
    "UPSTREAM_TIMEOUT_SECONDS",
    "SITE_URL",
    "REPO_OWNER",
    "REPO_NAME",
    "REPO_ACCESS_TOKEN",
    "REPO_BRANCH",
    "AUDIT_LOG_PATH",
    "CMS_ADMINS",
)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch):
    """Clear provider/repository settings so each test opts in explicitly.

    Behavior:
        - Removes all DevNotes-related environment variables.
        - Tests set what they need via `monkeypatch.setenv`.
    """
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    yield


@pytest.fixture(autouse=True)
def _reset_store_wiring():
    """Drop injected content stores after each test to avoid cross-test leaks."""
    yield
    try:
        from devnotes.web import storage_wiring
    except Exception:
        return
    storage_wiring.set_audit_store(None)
    storage_wiring.set_repo_store(None)
