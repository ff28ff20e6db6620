"""Shared pytest fixtures."""

import pytest

from fakes import FakeSource


@pytest.fixture
def abc_source() -> FakeSource:
    return FakeSource({1: ["a", "b"], 2: ["c"]})
