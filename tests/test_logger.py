"""Tests for logger setup."""
import logging

from pokerbot.utils.logger import ROOT_LOGGER, get_logger


class TestGetLogger:

    def test_module_loggers_share_root_handler(self):
        table_logger = get_logger("pokerbot.game.table")
        pot_logger = get_logger("pokerbot.game.pot")
        root = logging.getLogger(ROOT_LOGGER)

        assert table_logger.parent is not None
        assert not table_logger.handlers
        assert not pot_logger.handlers
        assert len(root.handlers) == 1

    def test_foreign_names_are_nested(self):
        assert get_logger("tests").name == "pokerbot.tests"

    def test_default_is_root(self):
        assert get_logger() is logging.getLogger(ROOT_LOGGER)
