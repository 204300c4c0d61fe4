"""Shared fixtures for the cash machine tests."""

import pytest

from cash_machine.audit import AuditLogger
from cash_machine.config import get_settings
from cash_machine.storage import InMemoryAuditStorage


@pytest.fixture
def stocked_notes():
    """The stock most withdrawal scenarios start from (total 1,955)."""
    return {
        1: 5,
        5: 10,
        10: 5,
        20: 5,
        50: 15,
        100: 10,
    }


@pytest.fixture
def audit_storage():
    return InMemoryAuditStorage()


@pytest.fixture
def audit_logger(audit_storage):
    return AuditLogger(audit_storage)


@pytest.fixture(autouse=True)
def clear_settings_cache(monkeypatch):
    """Keep the host environment out of the settings under test."""
    for name in (
        "CASH_MACHINE_MACHINE_ID",
        "CASH_MACHINE_DENOMINATIONS",
        "CASH_MACHINE_INITIAL_NOTES",
        "CASH_MACHINE_STRICT_DISPENSING",
        "CASH_MACHINE_LOG_LEVEL",
        "CASH_MACHINE_LOG_RENDERER",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
