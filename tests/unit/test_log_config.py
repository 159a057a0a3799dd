"""Unit tests for per-category logging configuration."""

import logging

from salespro_sync.config import Settings
from salespro_sync.infrastructure.logging.log_config import setup_logging


def test_category_levels_are_applied():
    setup_logging(Settings(log_level="INFO", log_level_http="ERROR", log_level_sync="DEBUG"))

    assert logging.getLogger("httpx").level == logging.ERROR
    assert logging.getLogger("salespro_sync.application.services").level == logging.DEBUG
    assert logging.getLogger("SyncPipeline").level == logging.DEBUG


def test_unknown_level_name_falls_back_to_info():
    setup_logging(Settings(log_level_remote="CHATTY"))

    assert logging.getLogger("salespro_sync.infrastructure.remote").level == logging.INFO
