from contextlib import nullcontext
from unittest.mock import patch

import pytest

from appforge.auth import User


@pytest.fixture(autouse=True)
def fast_settings(monkeypatch):
    monkeypatch.setenv("APPFORGE_STEP_DELAY_SECONDS", "0")
    monkeypatch.setenv("APPFORGE_CHAT_STEP_DELAY_SECONDS", "0")
    monkeypatch.setenv("APPFORGE_CHAT_STREAM_DELAY_SECONDS", "0")
    monkeypatch.setenv("APPFORGE_LOG_LEVEL", "ERROR")


@pytest.fixture
def patch_command_store(store):
    """Point a command module at the in-memory store, signed in as user-1."""
    patches = []

    def _patch(module: str):
        for target, kwargs in (
            ("open_store", {"side_effect": lambda: nullcontext(store)}),
            ("current_user", {"return_value": User(id="user-1")}),
        ):
            patcher = patch(f"appforge.cli.commands.{module}.{target}", **kwargs)
            patcher.start()
            patches.append(patcher)
        return store

    yield _patch
    for patcher in reversed(patches):
        patcher.stop()
