from __future__ import annotations

import os
from pathlib import Path

import pytest

from telegram_bridge.access import AccessFilter
from telegram_bridge.bridge import CorrelationBridge
from tests.support import ALLOWED_CHATS, RecordingOutbound


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for key in list(os.environ):
        if key.startswith("TELEGRAM_BRIDGE_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def outbound() -> RecordingOutbound:
    return RecordingOutbound()


@pytest.fixture
def bridge(outbound: RecordingOutbound) -> CorrelationBridge:
    return CorrelationBridge(outbound, AccessFilter(ALLOWED_CHATS), request_timeout=5.0)
