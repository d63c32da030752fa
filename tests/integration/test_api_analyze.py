"""Integration tests for /activities/analyze."""
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from ridetrace.analysis.aggregator import EmptyActivity
from ridetrace.api.main import create_app
from ridetrace.fit.records import DecodedActivity


@pytest.fixture(name="client")
def client_fixture():
    with TestClient(create_app()) as c:
        yield c


class TestHealth:
    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}


class TestAnalyze:
    def test_returns_summary(self, client, ride_activity):
        with patch("ridetrace.api.routes.activities.decode_fit_bytes", return_value=ride_activity) as dec:
            resp = client.post("/activities/analyze", content=b"FITDATA")
        assert resp.status_code == 200
        dec.assert_called_once_with(b"FITDATA")
        body = resp.json()
        assert body["ElapsedTime"] == 119
        assert body["NormalizedPower"] == pytest.approx(200.0)
        assert "PowerZones" not in body

    def test_ftp_query_adds_zones(self, client, ride_activity):
        with patch("ridetrace.api.routes.activities.decode_fit_bytes", return_value=ride_activity):
            resp = client.post("/activities/analyze?ftp=200", content=b"FITDATA")
        body = resp.json()
        assert body["PowerZoneBuckets"] == [0, 0, 0, 0, 119, 0, 0]
        assert body["PowerZones"][6]["powerHigh"] is None

    def test_garbage_body_is_422(self, client):
        resp = client.post("/activities/analyze", content=b"definitely not a fit file")
        assert resp.status_code == 422
        assert "decode" in resp.json()["detail"]

    def test_empty_body_is_422(self, client):
        assert client.post("/activities/analyze").status_code == 422

    def test_empty_activity_is_422(self, client):
        with patch("ridetrace.api.routes.activities.decode_fit_bytes", return_value=DecodedActivity()):
            resp = client.post("/activities/analyze", content=b"FITDATA")
        assert resp.status_code == 422
