import pytest

from mortgage_sim.errors import InvalidParameter
from mortgage_sim_web.app import create_app, payload_to_input
from mortgage_sim_web.config import Settings
from mortgage_sim_web.rate_cache import RateCache
from mortgage_sim_web.rate_scraper import RateScrapingError

ORIGIN = "https://simulator.test"


def _make_app(fetcher):
    settings = Settings(cache_url="sqlite://", cors_origin=ORIGIN)
    return create_app(settings=settings, cache=RateCache("sqlite://"), rate_fetcher=fetcher)


@pytest.fixture
def client(euribor):
    app = _make_app(lambda: euribor)
    app.config["TESTING"] = True
    return app.test_client()


@pytest.fixture
def broken_client():
    def fetcher():
        raise RateScrapingError("Could not find the Euribor value on the page")

    app = _make_app(fetcher)
    app.config["TESTING"] = True
    return app.test_client()


class TestReferenceRate:
    @pytest.mark.parametrize("path", ["/", "/api/reference-rate"])
    def test_returns_rate(self, client, path):
        resp = client.get(path)
        assert resp.status_code == 200
        assert resp.get_json() == {"value": 2.5, "date": "2024-05-02", "rawValue": "2,5%"}
        assert resp.headers["Access-Control-Allow-Origin"] == ORIGIN

    def test_scraping_failure(self, broken_client):
        resp = broken_client.get("/api/reference-rate")
        assert resp.status_code == 500
        body = resp.get_json()
        assert body["error"]
        assert "Euribor" in body["message"]

    def test_rate_is_cached(self, euribor):
        calls = []

        def fetcher():
            calls.append(1)
            return euribor

        client = _make_app(fetcher).test_client()
        client.get("/api/reference-rate")
        client.get("/api/reference-rate")
        assert len(calls) == 1


class TestCalculate:
    def test_json_body(self, client):
        resp = client.post(
            "/api/calculate",
            json={"principal": 200000, "annualInterestRatePercent": 3, "termMonths": 360},
        )
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["monthlyPayment"] == 843.21
        assert len(body["schedule"]) == 360
        assert "earlyRepayment" not in body

    def test_form_body_with_early_repayment(self, client):
        resp = client.post(
            "/api/calculate",
            data={
                "loanAmount": "150.000",
                "interestRate": "3",
                "term": "30",
                "termType": "years",
                "earlyRepayment": "10.000",
                "includeYearly": "1",
            },
        )
        assert resp.status_code == 200
        body = resp.get_json()
        early = body["earlyRepayment"]
        assert early["reduceTerm"]["savings"] > early["reducePayment"]["savings"] > 0
        assert len(body["yearly"]) == 30

    def test_variable_rate_uses_reference(self, client):
        resp = client.post(
            "/api/calculate",
            json={
                "loanAmount": "150.000",
                "interestType": "variable",
                "differential": "1",
                "interestRate": "9",
                "term": 30,
            },
        )
        body = resp.get_json()
        assert body["annualInterestRatePercent"] == 3.5
        assert body["referenceRate"]["value"] == 2.5

    def test_variable_rate_without_reference(self, broken_client):
        resp = broken_client.post(
            "/api/calculate",
            json={"principal": 150000, "interestType": "variable", "interestRate": "4", "term": 30},
        )
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["annualInterestRatePercent"] == 4.0
        assert "referenceRate" not in body

    def test_invalid_parameter(self, client):
        resp = client.post("/api/calculate", json={"principal": 0, "interestRate": 3, "term": 30})
        assert resp.status_code == 400
        body = resp.get_json()
        assert body["field"] == "principal"

    def test_prepayment_exceeding_balance(self, client):
        resp = client.post(
            "/api/calculate",
            json={"principal": 150000, "interestRate": 3, "term": 30, "prepaymentAmount": 200000},
        )
        assert resp.status_code == 200
        body = resp.get_json()
        assert "earlyRepayment" not in body
        assert "remaining balance" in body["earlyRepaymentError"]

    def test_prepayment_month_zero(self, client):
        resp = client.post(
            "/api/calculate",
            json={
                "principal": 150000,
                "interestRate": 3,
                "termMonths": 360,
                "prepaymentAmount": 10000,
                "prepaymentMonth": 0,
            },
        )
        assert resp.status_code == 400
        assert resp.get_json()["field"] == "prepayment_month"

    def test_one_year_loan_with_prepayment(self, client):
        resp = client.post(
            "/api/calculate",
            json={"principal": 10000, "interestRate": 3, "termMonths": 12, "prepaymentAmount": 1000},
        )
        assert resp.status_code == 200
        body = resp.get_json()
        assert len(body["schedule"]) == 12
        assert "earlyRepayment" not in body
        assert "month 12" in body["earlyRepaymentError"]

    def test_yearly_for_forty_year_term(self, client):
        resp = client.post(
            "/api/calculate",
            json={"principal": 300000, "interestRate": 4, "termMonths": 480, "includeYearly": True},
        )
        body = resp.get_json()
        assert len(body["schedule"]) == 360
        assert body["scheduleTruncated"] == 120
        assert len(body["yearly"]) == 40

    def test_preflight(self, client):
        resp = client.options("/api/calculate")
        assert resp.status_code == 204
        assert resp.headers["Access-Control-Allow-Origin"] == ORIGIN


class TestPayloadToInput:
    def test_end_date(self):
        data = payload_to_input({"principal": 1, "endDate": "2050-06-01"})
        assert data.term_type == "end_date"
        assert data.end_date.year == 2050

    def test_bad_end_date(self):
        with pytest.raises(InvalidParameter):
            payload_to_input({"principal": 1, "endDate": "June"})

    def test_bad_prepayment_month(self):
        with pytest.raises(InvalidParameter):
            payload_to_input({"principal": 1, "term": 30, "prepaymentMonth": "soon"})


class TestSettings:
    def test_defaults(self):
        settings = Settings.from_env({})
        assert settings.cache_ttl_seconds == 21600
        assert settings.rate_source_url.endswith("/euribor")

    def test_overrides(self):
        settings = Settings.from_env(
            {"MORTGAGE_RATE_CACHE_TTL": "60", "MORTGAGE_LOG_LEVEL": "debug", "MORTGAGE_HTTP_TIMEOUT": "3"}
        )
        assert settings.cache_ttl_seconds == 60
        assert settings.log_level == "DEBUG"
        assert settings.http_timeout == 3.0
