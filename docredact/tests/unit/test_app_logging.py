import json
import logging

from docredact.app_logging import JsonFormatter, job_logger
from docredact.config import Settings


def _record(logger_name="docredact.test", **extra):
    record = logging.LogRecord(logger_name, logging.INFO, __file__, 1, "hello %s", ("world",), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_includes_extra_context():
    payload = json.loads(JsonFormatter().format(_record(job_id="job-1", page=2, obj=object())))

    assert payload["message"] == "hello world"
    assert payload["level"] == "INFO"
    assert payload["job_id"] == "job-1"
    assert payload["page"] == 2
    assert "obj" not in payload
    assert payload["ts"].endswith("Z")


def test_job_logger_attaches_job_id(caplog):
    log = job_logger(logging.getLogger("docredact.test"), "job-7")

    with caplog.at_level(logging.INFO, logger="docredact.test"):
        log.info("processing", extra={"page": 3})

    record = caplog.records[-1]
    assert record.job_id == "job-7"
    assert record.page == 3


def test_job_logger_without_id_adds_nothing(caplog):
    with caplog.at_level(logging.INFO, logger="docredact.test"):
        job_logger(logging.getLogger("docredact.test"), None).info("no job")

    assert not hasattr(caplog.records[-1], "job_id")


def test_settings_normalize_endpoint():
    assert Settings(AZURE_OPENAI_ENDPOINT=" https://example.openai.azure.com ").ensure_endpoint() == (
        "https://example.openai.azure.com/"
    )
    assert Settings(AZURE_OPENAI_ENDPOINT="").ensure_endpoint() == ""
