"""
Test configuration — puts agent/ on sys.path and isolates the app directory.

NOPONTO_HOME must be set before noponto_core.config is imported: config
creates its directory and log file at import time.
"""

import os
import sys
import tempfile
from datetime import datetime, timedelta
from pathlib import Path

import pytest

AGENT_DIR = Path(__file__).parent.parent / "agent"
if str(AGENT_DIR) not in sys.path:
    sys.path.insert(0, str(AGENT_DIR))

os.environ["NOPONTO_HOME"] = tempfile.mkdtemp(prefix="noponto-test-")

from noponto_core.notifier import NotificationSink  # noqa: E402
from noponto_core.vault import CredentialVault, JsonStore, KeyFile, PontoConfig  # noqa: E402


class FakeClock:
    """Callable clock that tests advance by hand."""

    def __init__(self, start):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


class RecordingSink(NotificationSink):
    def __init__(self, fail=False):
        self.notifications = []
        self.surfaced = 0
        self.fail = fail

    def notify(self, notification):
        if self.fail:
            raise RuntimeError("display unavailable")
        self.notifications.append(notification)

    def surface_window(self):
        if self.fail:
            raise RuntimeError("no main window")
        self.surfaced += 1

    def kinds(self):
        return [n.kind for n in self.notifications]


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 10, 18, 16, 0))


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def vault(tmp_path):
    return CredentialVault(JsonStore(tmp_path / "noponto.dat"), KeyFile(tmp_path / "vault.key"))


@pytest.fixture
def ponto_config():
    return PontoConfig(
        employee_id="4242",
        access_token="tok-abc",
        client="client-xyz",
        uid="ana@example.com",
        uuid="0f8fad5b-d9cb-469f-a165-70867728950e",
    )
