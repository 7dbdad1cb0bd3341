import json
import logging
import sys
from decimal import Decimal

from config.logging import AUDIT_EVENTS, JsonFormatter, SamplingFilter, build_logging


def _record(msg, level=logging.INFO, **extra):
    record = logging.LogRecord("storefront.orders", level, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_merges_extras():
    line = JsonFormatter().format(
        _record("order_status_changed", event="order_status_changed", order_id=7, total=Decimal("55.00"))
    )
    payload = json.loads(line)
    assert payload["message"] == "order_status_changed"
    assert payload["order_id"] == 7
    assert payload["total"] == "55.00"
    assert payload["level"] == "INFO"
    assert payload["time"].endswith("Z")
    assert "lineno" not in payload


def test_json_formatter_stringifies_unserializable_values_and_exceptions():
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        record = _record("payment_provider_error", product=object())
        record.exc_info = sys.exc_info()
    payload = json.loads(JsonFormatter().format(record))
    assert isinstance(payload["product"], str)
    assert "RuntimeError: boom" in payload["exc_info"]


def test_sampling_filter_never_drops_audit_events():
    sampler = SamplingFilter(rate=0.0, levels=["INFO"])
    assert sampler.filter(_record("stock_changed"))
    assert sampler.filter(_record("ledger entry", event="payment_event_received"))
    assert not sampler.filter(_record("order_listed"))
    assert sampler.filter(_record("order_listed", level=logging.WARNING))


def test_build_logging_samples_only_order_logs():
    config = build_logging(formatter="verbose", orders_sample_rate=0.5)
    assert config["handlers"]["console"]["formatter"] == "verbose"
    assert config["filters"]["orders_info_sample"]["rate"] == 0.5
    assert config["filters"]["orders_info_sample"]["allow_events"] == list(AUDIT_EVENTS)
    assert config["loggers"]["storefront.orders"]["handlers"] == ["orders_console"]
    assert config["loggers"]["storefront"]["handlers"] == ["console"]
