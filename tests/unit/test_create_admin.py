"""
Unit tests for the admin bootstrap script.
It asserts expected behavior and guards against regressions in the corresponding component.
These tests are executed by `pytest` locally and in CI and should remain deterministic.
"""

from __future__ import annotations

import json
import sys

import pytest

from marketplace.api import api_config
from marketplace.common import settings as settings_module
from scripts import create_admin


@pytest.fixture(autouse=True)
def fresh_config(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("API_PASSWORD_HASH_ROUNDS", "4")
    settings_module.get_settings.cache_clear()
    api_config.get_api_config.cache_clear()
    yield
    settings_module.get_settings.cache_clear()
    api_config.get_api_config.cache_clear()


def _run(monkeypatch: pytest.MonkeyPatch, *args: str) -> None:
    monkeypatch.setattr(sys, "argv", ["create_admin.py", *args])
    create_admin.main()


def test_short_admin_password_is_rejected(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    with pytest.raises(SystemExit) as excinfo:
        _run(monkeypatch, "--name", "Root", "--email", "root@marketplace.io", "--password", "x")

    assert excinfo.value.code == 1
    assert "Password must be at least 6 characters." in capsys.readouterr().err


def test_admin_is_created_with_valid_fields(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    _run(monkeypatch, "--name", "Root", "--email", "Root@Marketplace.io", "--password", "secret123")

    created = json.loads(capsys.readouterr().out)
    assert created["email"] == "root@marketplace.io"
    assert created["role"] == "admin"
