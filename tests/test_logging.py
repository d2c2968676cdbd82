"""Tests for logging hygiene."""

import logging

from rich.logging import RichHandler

from traitmix.cli.app import _log_console, setup_logging
from traitmix.core.models import LayerConfig
from traitmix.generation.catalog import load_catalog


def test_catalog_reports_through_logging_not_print(trait_tree, capsys, caplog):
    root = trait_tree({"Body": ["Tall.png"]})

    with caplog.at_level("INFO", logger="traitmix"):
        load_catalog([LayerConfig(name="Eyes"), LayerConfig(name="Body")], root)

    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Layer folder" in caplog.text
    assert "1 layer(s), 1 trait(s)" in caplog.text


def test_setup_logging_levels():
    setup_logging()
    assert logging.getLogger("traitmix").level == logging.WARNING

    setup_logging(verbose=True)
    assert logging.getLogger("traitmix").level == logging.INFO

    setup_logging(verbose=True, debug=True)
    assert logging.getLogger("traitmix").level == logging.DEBUG


def test_logs_go_to_stderr_console():
    setup_logging()
    (handler,) = [
        h for h in logging.getLogger().handlers if isinstance(h, RichHandler)
    ]
    assert handler.console is _log_console
    assert handler.console.stderr
