"""
Shared pytest fixtures for store tests.
"""

import tempfile

import pytest

from pathstore.engine.store import Store


@pytest.fixture
def temp_dir():
    """Provide a temporary directory that is cleaned up after test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture(params=[True, False], ids=["mirrored", "direct"])
def in_memory(request):
    """Run a test once per store mode."""
    return request.param


@pytest.fixture
def store(temp_dir, in_memory):
    """Provide an open Store in each mode."""
    with Store("test", data_dir=temp_dir, in_memory=in_memory) as st:
        yield st


@pytest.fixture
def sample_user():
    """Provide a nested sample value."""
    return {
        "name": "Ann",
        "score": 0,
        "tags": ["admin", "beta"],
        "profile": {"city": "Lyon", "langs": ["fr", "en"]},
        "active": True,
        "manager": None,
    }
