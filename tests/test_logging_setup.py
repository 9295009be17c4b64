from __future__ import annotations

import logging

import pytest

from taskstore_api import logging_setup


def _record(name: str, level: int) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, "msg", None, None)


def test_filter_keeps_own_logs_and_quiets_third_party() -> None:
    noise_filter = logging_setup._ThirdPartyNoiseFilter()

    assert noise_filter.filter(_record("taskstore_api.main", logging.DEBUG))
    assert noise_filter.filter(_record("task_client.client", logging.INFO))
    assert not noise_filter.filter(_record("httpx", logging.INFO))
    assert noise_filter.filter(_record("httpx", logging.WARNING))


def test_configure_logging_is_noop_when_root_has_handlers(monkeypatch: pytest.MonkeyPatch) -> None:
    root = logging.getLogger()
    sentinel = logging.NullHandler()
    monkeypatch.setattr(root, "handlers", [sentinel])
    level_before = root.level

    logging_setup.configure_logging("DEBUG")

    assert root.handlers == [sentinel]
    assert root.level == level_before


def test_configure_logging_attaches_one_handler(monkeypatch: pytest.MonkeyPatch) -> None:
    root = logging.getLogger()
    monkeypatch.setattr(root, "handlers", [])
    monkeypatch.setattr(root, "level", root.level)

    logging_setup.configure_logging("warning")

    assert len(root.handlers) == 1
    assert root.level == logging.WARNING
