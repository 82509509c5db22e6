from decimal import Decimal

import httpx
import pytest

from mortgage_sim.rate_client import RateServiceError, fetch_reference_rate, reference_rate_from_payload

URL = "http://rates.test/"


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


class TestFetchReferenceRate:
    def test_parses_payload(self):
        def handler(request):
            return httpx.Response(200, json={"value": 2.451, "date": "2024-05-02", "rawValue": "2,451%"})

        rate = fetch_reference_rate(URL, client=_client(handler))
        assert rate.value == Decimal("2.451")
        assert rate.date == "2024-05-02"
        assert rate.raw_value == "2,451%"

    def test_retries_once(self):
        calls = []

        def handler(request):
            calls.append(request)
            if len(calls) == 1:
                return httpx.Response(500)
            return httpx.Response(200, json={"value": 2.5, "date": "2024-05-02"})

        rate = fetch_reference_rate(URL, client=_client(handler))
        assert rate.value == Decimal("2.5")
        assert len(calls) == 2

    def test_gives_up_after_retry(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(503)

        with pytest.raises(RateServiceError):
            fetch_reference_rate(URL, client=_client(handler))
        assert len(calls) == 2

    def test_non_json_body(self):
        def handler(request):
            return httpx.Response(200, text="<html>oops</html>")

        with pytest.raises(RateServiceError):
            fetch_reference_rate(URL, client=_client(handler))


class TestPayload:
    def test_missing_value(self):
        with pytest.raises(RateServiceError):
            reference_rate_from_payload({"date": "2024-05-02"})
