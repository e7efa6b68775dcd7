import logging

from libtrends.utils.logging_setup import configure_logging_from_env


def test_repeated_configuration_keeps_one_console_handler(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "debug")
    logger = configure_logging_from_env("libtrends.test.repeat")
    configure_logging_from_env("libtrends.test.repeat")
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 1


def test_file_logging(monkeypatch, tmp_path):
    log_file = tmp_path / "logs" / "out.log"
    monkeypatch.setenv("LOG_TO_FILE", "true")
    monkeypatch.setenv("LOG_FILE", str(log_file))
    logger = configure_logging_from_env("libtrends.test.file")
    logger.info("library_loaded raw=%d", 3)
    for h in logger.handlers:
        h.flush()
    assert "library_loaded raw=3" in log_file.read_text(encoding="utf-8")
    for h in list(logger.handlers):
        h.close()
        logger.removeHandler(h)
