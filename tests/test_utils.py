from __future__ import annotations

import logging

import pytest

from product_crawler.engines.pool_engine import WorkerPoolCrawlEngine
from product_crawler.utils.loader import load_symbol
from product_crawler.utils.logging import setup_logging


class TestLoadSymbol:
    def test_colon_and_dot_forms(self) -> None:
        assert load_symbol("product_crawler.engines.pool_engine:WorkerPoolCrawlEngine") is WorkerPoolCrawlEngine
        assert load_symbol("product_crawler.engines.pool_engine.WorkerPoolCrawlEngine") is WorkerPoolCrawlEngine

    def test_missing_attribute(self) -> None:
        with pytest.raises(ImportError, match="NoSuchEngine"):
            load_symbol("product_crawler.engines.pool_engine:NoSuchEngine")

    def test_missing_module(self) -> None:
        with pytest.raises(ImportError):
            load_symbol("product_crawler.nope:Thing")

    def test_not_dotted(self) -> None:
        with pytest.raises(ImportError):
            load_symbol("Engine")


def test_setup_logging_levels(monkeypatch: pytest.MonkeyPatch) -> None:
    assert setup_logging("debug") == logging.DEBUG
    assert setup_logging("bogus") == logging.INFO
    monkeypatch.setenv("CRAWLER_LOG_LEVEL", "ERROR")
    assert setup_logging() == logging.ERROR
    assert logging.getLogger("aiohttp").level == logging.WARNING
