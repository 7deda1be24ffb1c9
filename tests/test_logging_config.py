"""Tests for logging setup."""

import logging

import pytest

from pgc.logging_config import log_level_for, setup_logging


@pytest.fixture
def pgc_logger():
    logger = logging.getLogger('pgc')
    yield logger
    for handler in logger.handlers:
        handler.close()
    logger.handlers = []
    logger.setLevel(logging.NOTSET)


class TestLogLevelFor:
    """Tests for mapping CLI flags to a console level."""

    def test_levels(self):
        """Test default, verbose and quiet levels."""
        assert log_level_for() == logging.INFO
        assert log_level_for(verbose=True) == logging.DEBUG
        assert log_level_for(quiet=True) == logging.WARNING

    def test_verbose_wins(self):
        """Test --verbose overrides --quiet."""
        assert log_level_for(verbose=True, quiet=True) == logging.DEBUG


class TestSetupLogging:
    """Tests for setup_logging()."""

    def test_console_only_by_default(self, pgc_logger):
        """Test no log file is written unless a directory is given."""
        logger = setup_logging()
        assert logger is pgc_logger
        assert len(logger.handlers) == 1
        assert not isinstance(logger.handlers[0], logging.FileHandler)
        assert logger.level == logging.INFO

    def test_run_log_file(self, tmp_path, pgc_logger):
        """Test a per-run file captures debug lines below the console level."""
        setup_logging(level=logging.WARNING, log_dir=tmp_path / 'logs', run_name='score', console=False)
        logging.getLogger('pgc.scorer').debug('cycle detail')
        for handler in pgc_logger.handlers:
            handler.flush()

        files = list((tmp_path / 'logs').glob('score_*.log'))
        assert len(files) == 1
        assert 'cycle detail' in files[0].read_text(encoding='utf-8')
        assert pgc_logger.level == logging.DEBUG

    def test_console_on_stderr(self, pgc_logger, capsys):
        """Test console records go to stderr, leaving stdout for standings."""
        setup_logging()
        logging.getLogger('pgc.autoscorer').info('scored 3 teams')
        captured = capsys.readouterr()
        assert 'scored 3 teams' in captured.err
        assert 'scored 3 teams' not in captured.out

    def test_rerun_replaces_handlers(self, pgc_logger):
        """Test calling setup twice does not stack handlers."""
        setup_logging()
        setup_logging(level=logging.DEBUG)
        assert len(pgc_logger.handlers) == 1
        assert pgc_logger.level == logging.DEBUG

    def test_library_loggers_quieted(self, pgc_logger):
        """Test HTTP library loggers stay at WARNING even in verbose runs."""
        setup_logging(level=logging.DEBUG, console=False)
        child = logging.getLogger('pgc.scorer')
        assert child.parent is pgc_logger
        assert logging.getLogger('urllib3').level == logging.WARNING
        assert logging.getLogger('requests').level == logging.WARNING
