import json
import logging
import re

from csvload.canonical.types import Date
from csvload.observability.logger import JsonEventFormatter, RequestTimer, generate_request_id


def _record(level=logging.INFO, **extra):
    record = logging.LogRecord("csvload", level, __file__, 1, "msg", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_event_is_rendered_as_json(monkeypatch):
    monkeypatch.setenv("LOG_COLOR", "0")
    record = _record(
        logging.WARNING,
        event_type="MYSQL_BATCH_FAILED",
        payload={"table": "t_tmp", "first_row": 1, "day": Date(2021, 1, 2)},
    )
    body = json.loads(JsonEventFormatter("%(message)s").format(record))
    assert body == {
        "event_type": "MYSQL_BATCH_FAILED",
        "level": "WARNING",
        "table": "t_tmp",
        "first_row": 1,
        "day": "2021-01-02",
    }


def test_plain_records_keep_the_message():
    assert JsonEventFormatter("%(message)s").format(_record()) == "msg"


def test_request_ids_name_the_operation():
    assert re.fullmatch(r"load-[0-9a-f]{12}", generate_request_id("load"))
    assert generate_request_id() != generate_request_id()


def test_timer_phases():
    timer = RequestTimer()
    timer.mark("parse")
    timer.mark("outputs")
    assert list(timer.phases) == ["parse", "outputs"]
    assert timer.duration("parse") >= 0
    assert timer.duration() >= timer.duration("outputs")
