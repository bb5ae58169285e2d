import json
import logging

from codebox.log import JsonFormatter, setup_logging


def test_json_formatter_emits_structured_record() -> None:
    record = logging.LogRecord("codebox.runner", logging.WARNING, __file__, 1, "took %dms", (12,), None)

    payload = json.loads(JsonFormatter().format(record))

    assert payload["level"] == "WARNING"
    assert payload["msg"] == "took 12ms"
    assert payload["logger"] == "codebox.runner"
    assert "exc_info" not in payload


def test_setup_logging_installs_single_handler() -> None:
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        setup_logging("debug", fmt="json")
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JsonFormatter)
    finally:
        root.handlers = saved_handlers
        root.setLevel(saved_level)
