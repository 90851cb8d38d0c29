"""Root test configuration: isolate settings from the host environment"""

import os

import pytest


_ENV_PREFIX = "PODTHREAD_"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Drop PODTHREAD_* variables and run each test from an empty directory."""
    for name in list(os.environ):
        if name.startswith(_ENV_PREFIX):
            monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
