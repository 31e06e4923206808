import logging
from unittest.mock import patch

from airtable_plusplus.utils.logger import configure_logging, log_error, log_info


def test_log_info_appends_details(caplog):
    with caplog.at_level(logging.INFO, logger="airtable_plusplus"):
        log_info("Upsert matched 2 row(s) in Students", "Code = 7")

    assert caplog.records[-1].getMessage() == "Upsert matched 2 row(s) in Students → Code = 7"


def test_log_error_marks_message(caplog):
    with caplog.at_level(logging.ERROR, logger="airtable_plusplus"):
        log_error("Create called without data")

    assert caplog.records[-1].levelno == logging.ERROR
    assert caplog.records[-1].getMessage() == "❌ Create called without data"


@patch('airtable_plusplus.utils.logger.logging.basicConfig')
def test_configure_logging_installs_console_format(mock_basic_config):
    configure_logging(logging.DEBUG)

    _, kwargs = mock_basic_config.call_args
    assert kwargs["level"] == logging.DEBUG
    assert kwargs["format"] == '%(asctime)s | %(levelname)-8s | %(message)s'
