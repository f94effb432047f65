import pytest

FROZEN_NOW = 1700000000.75


@pytest.fixture
def frozen_now(monkeypatch):
    """Pin the wall clock used for the current-time fallback"""
    monkeypatch.setattr('msg_parse.normalized_timestamp.time.time', lambda: FROZEN_NOW)
    return int(FROZEN_NOW)
