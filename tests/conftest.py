from __future__ import annotations

import pytest

import httpc


@pytest.fixture(autouse=True)
def _reset_globals():
    httpc.reset_globals()
    yield
    httpc.reset_globals()
