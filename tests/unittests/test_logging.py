import json
import logging

from reposync.main.job_context import clear_job_context, set_job_context
from reposync.main.logging import ContextJSONFormatter


def make_record(**extra):
    record = logging.LogRecord(
        name="reposync.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Dispatch complete for %s",
        args=("tag-download",),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_merges_job_context_and_extras():
    set_job_context(job_id="download_tags:1", task="download_tags")
    try:
        output = json.loads(ContextJSONFormatter().format(make_record(queue_name="arq:tags")))
    finally:
        clear_job_context()

    assert output["message"] == "Dispatch complete for tag-download"
    assert output["level"] == "info"
    assert output["job_id"] == "download_tags:1"
    assert output["task"] == "download_tags"
    assert output["queue_name"] == "arq:tags"


def test_none_extras_are_dropped():
    output = json.loads(ContextJSONFormatter().format(make_record(error=None)))

    assert "error" not in output


def test_job_context_none_clears_key():
    set_job_context(job_id="x", repository_id="r")
    try:
        context = set_job_context(repository_id=None)
    finally:
        clear_job_context()

    assert context == {"job_id": "x"}
