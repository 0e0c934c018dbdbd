import json
import logging

from metallbau.core.logging import JsonFormatter


def test_json_formatter_carries_structured_extras():
    record = logging.LogRecord(
        name="metallbau.services.cost_booking_service",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg="project cost total diverges from ledger",
        args=(),
        exc_info=None,
    )
    record.project_id = 7
    record.ledger_total_cents = 4000

    payload = json.loads(JsonFormatter().format(record))

    assert payload["service"] == "metallbau-controlling"
    assert payload["level"] == "WARNING"
    assert payload["message"] == "project cost total diverges from ledger"
    assert payload["extra"] == {"project_id": 7, "ledger_total_cents": 4000}
