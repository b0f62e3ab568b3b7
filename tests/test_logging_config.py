import logging

import pytest

from gridstrings.logging_config import LOGGER_NAME, parse_module_levels, setup_logging


@pytest.fixture(autouse=True)
def restore_loggers():
    names = [LOGGER_NAME, f"{LOGGER_NAME}.hit_test", "websockets"]
    saved = {name: logging.getLogger(name).level for name in names}
    handlers = list(logging.getLogger(LOGGER_NAME).handlers)
    yield
    package_logger = logging.getLogger(LOGGER_NAME)
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()
    for handler in handlers:
        package_logger.addHandler(handler)
    for name, level in saved.items():
        logging.getLogger(name).setLevel(level)


def test_parse_module_levels():
    levels = parse_module_levels(["hit_test=warning", "gridstrings.audio_engine=DEBUG"])

    assert levels == {
        "gridstrings.hit_test": logging.WARNING,
        "gridstrings.audio_engine": logging.DEBUG,
    }
    assert parse_module_levels(None) == {}


@pytest.mark.parametrize("spec", ["hit_test", "hit_test=LOUD", "=INFO"])
def test_parse_module_levels_rejects_bad_specs(spec):
    with pytest.raises(ValueError):
        parse_module_levels([spec])


def test_setup_twice_keeps_one_handler(tmp_path):
    setup_logging(logging.INFO)
    logger = setup_logging(logging.INFO, str(tmp_path / "run.log"))

    assert logger.name == LOGGER_NAME
    assert len(logger.handlers) == 2
    assert logger.level == logging.INFO


def test_module_levels_applied():
    setup_logging(logging.DEBUG, module_levels={"gridstrings.hit_test": logging.WARNING})

    assert logging.getLogger("gridstrings.hit_test").level == logging.WARNING
    assert logging.getLogger("websockets").level == logging.WARNING


def test_debug_format_includes_line_number():
    debug_logger = setup_logging(logging.DEBUG)
    assert "%(lineno)d" in debug_logger.handlers[0].formatter._fmt

    info_logger = setup_logging(logging.INFO)
    assert "%(lineno)d" not in info_logger.handlers[0].formatter._fmt


def test_log_file_receives_records(tmp_path):
    path = tmp_path / "run.log"
    logger = setup_logging(logging.INFO, str(path))

    logging.getLogger("gridstrings.layout").info("grid ready")
    for handler in logger.handlers:
        handler.flush()

    assert "gridstrings.layout - INFO - grid ready" in path.read_text(encoding="utf-8")
