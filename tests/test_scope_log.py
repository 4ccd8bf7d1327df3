from loguru import logger

from replscope.scope_config import SessionConfig
from replscope.scope_log import configure_from, configure_logging


def test_file_sink_receives_messages(tmp_path):
    log_file = tmp_path / "replscope.log"
    configure_logging("DEBUG", str(log_file))
    logger.info("hello from the session")
    logger.remove()
    text = log_file.read_text(encoding="utf-8")
    assert "| INFO | hello from the session" in text
    assert "Logger initialized at level DEBUG" in text


def test_level_filters_file_sink(tmp_path):
    log_file = tmp_path / "replscope.log"
    configure_from(SessionConfig(log_level="warning", log_file=str(log_file)))
    logger.info("quiet")
    logger.warning("loud")
    logger.remove()
    text = log_file.read_text(encoding="utf-8")
    assert "quiet" not in text
    assert "loud" in text


def test_stderr_sink(capsys):
    configure_logging("INFO")
    logger.error("visible")
    logger.remove()
    assert "| ERROR | visible" in capsys.readouterr().err
