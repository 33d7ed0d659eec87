"""Shared test fixtures."""

from __future__ import annotations

import os
import time
from pathlib import Path

import pytest

from nodenuke.core.channel import Receiver
from nodenuke.settings import Settings


def make_tree(root: Path, files: dict[str, int]) -> None:
    """Create (sparse) files of the given sizes in bytes under *root*."""
    for rel, size in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "wb") as f:
            f.truncate(size)


def set_mtime(path: Path, seconds_ago: int) -> int:
    stamp = int(time.time()) - seconds_ago
    os.utime(path, (stamp, stamp))
    return stamp


def drain(receiver: Receiver, timeout: float = 10.0) -> list:
    """Collect messages until the sender closes or *timeout* expires."""
    messages = []
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        msg = receiver.recv(timeout=0.05)
        if msg is not None:
            messages.append(msg)
        elif receiver.disconnected:
            break
    return messages


def run_until(app, predicate, timeout: float = 10.0) -> None:
    """Tick *app* until *predicate* holds."""
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            raise AssertionError("timed out waiting for the app")
        app.tick()
        time.sleep(0.01)


@pytest.fixture
def fake_home(tmp_path, monkeypatch):
    """Point HOME at a temp directory."""
    home = tmp_path / "home" / "alice"
    home.mkdir(parents=True)
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("USERPROFILE", raising=False)
    return home


@pytest.fixture
def isolate_settings(tmp_path, monkeypatch):
    """Redirect settings to a temp config directory."""
    config = tmp_path / "config"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config))
    monkeypatch.setattr(Settings, "_instance", None)
    return config / "nodenuke" / "settings.json"
