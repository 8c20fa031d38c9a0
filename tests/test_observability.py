import json
from unittest.mock import AsyncMock, Mock

from fastapi.testclient import TestClient

from flight_gateway.obs.context import request_id_var, clear_context
from flight_gateway.obs.logger import log_event
from flight_gateway.obs.metrics import (
    get_metrics_snapshot,
    inc_counter,
    record_timing,
    reset_metrics,
)


def test_logger_emits_json_with_request_id(capsys):
    request_id_var.set("req-123")
    try:
        log_event("step", level="WARNING", offers=3)
    finally:
        clear_context()
    line = json.loads(capsys.readouterr().out.strip())
    assert line["event"] == "step"
    assert line["level"] == "WARNING"
    assert line["request_id"] == "req-123"
    assert line["offers"] == 3


def test_logger_masks_secrets(capsys):
    log_event("token_debug", access_token="abcdefghijklmnop", client_secret="shh")
    out = capsys.readouterr().out
    assert "abcdefghijklmnop" not in out
    assert "abcd***" in out
    assert "shh" not in out


def test_histogram_bins_and_counters():
    reset_metrics()
    inc_counter("vendor_calls_total", {"service": "FlightSearch", "status": "200"})
    inc_counter("vendor_calls_total", {"status": "200", "service": "FlightSearch"})
    record_timing("vendor_latency_ms", 75.0, {"service": "FlightSearch"})
    record_timing("vendor_latency_ms", 60000.0, {"service": "FlightSearch"})

    snap = get_metrics_snapshot()
    assert snap["counters"] == [{
        "name": "vendor_calls_total",
        "labels": {"service": "FlightSearch", "status": "200"},
        "value": 2,
    }]
    hist = snap["histograms"][0]
    assert hist["counts"][1] == 1  # 50 < 75 <= 100
    assert hist["counts"][-1] == 1  # overflow bucket
    assert hist["sum_ms"] == 60075.0


def test_failed_request_log_carries_error_kind(capsys):
    from main import app, fastapi_app, get_amadeus
    from flight_gateway.amadeus.client import AmadeusClient
    from flight_gateway.errors import UpstreamError

    amadeus = Mock(spec=AmadeusClient)
    amadeus.search_flights = AsyncMock(
        side_effect=UpstreamError("FlightSearch failed", status=503, body="busy")
    )
    fastapi_app.dependency_overrides[get_amadeus] = lambda: amadeus
    reset_metrics()
    try:
        r = TestClient(app).post("/api/flights/search", json={
            "originLocationCode": "NYC",
            "destinationLocationCode": "LAX",
            "departureDate": "2026-11-17",
        })
    finally:
        fastapi_app.dependency_overrides.clear()

    assert r.status_code == 502
    assert r.headers["x-upstream-status"] == "503"
    events = [json.loads(line) for line in capsys.readouterr().out.splitlines() if line.startswith("{")]
    request_log = next(e for e in events if e["event"] == "request")
    assert request_log["error_kind"] == "upstream"
    assert request_log["upstream_status"] == 503
    assert request_log["level"] == "ERROR"
    assert any(
        c["name"] == "request_errors_total"
        and c["labels"] == {"route": "/api/flights/search", "kind": "upstream"}
        for c in get_metrics_snapshot()["counters"]
    )


def test_metrics_capture_request_and_histogram():
    from main import app
    reset_metrics()
    client = TestClient(app)

    r = client.get("/health")
    assert r.status_code == 200
    assert r.headers["x-request-id"]

    data = client.get("/metrics").json()
    assert any(
        c["name"] == "requests_total" and c["labels"] == {"route": "/health", "status": "200"}
        for c in data["counters"]
    )
    assert any(
        h["name"] == "request_latency_ms" and h["labels"] == {"route": "/health"}
        for h in data["histograms"]
    )
