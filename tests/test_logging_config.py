from __future__ import annotations

import logging

from logging_config import ContextualFormatter, configure_logging


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="services.parser",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg="Skipping row %d: %s",
        args=(4, "invalid timestamp"),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_appends_known_extra_fields() -> None:
    formatter = ContextualFormatter(fmt="%(levelname)s %(message)s")

    text = formatter.format(_record(file_id="abc", row_number=4, reason=None, unrelated="x"))

    assert text == "WARNING Skipping row 4: invalid timestamp | file_id=abc row_number=4"


def test_formatter_without_extras_keeps_message() -> None:
    formatter = ContextualFormatter(fmt="%(message)s", extra_keys=["metric"])

    assert formatter.format(_record(file_id="abc")) == "Skipping row 4: invalid timestamp"


def test_configure_logging_quiets_http_client_loggers() -> None:
    configure_logging(level="DEBUG", force=True)

    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger("httpx").level == logging.WARNING
