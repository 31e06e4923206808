import os
import sys

import pytest

# Add the project root to sys.path to allow imports
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))


@pytest.fixture(autouse=True)
def clean_airtable_env(monkeypatch, tmp_path):
    """Keep a developer's AIRTABLE_* variables and .env file out of the tests."""
    for name in list(os.environ):
        if name.startswith("AIRTABLE_"):
            monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
