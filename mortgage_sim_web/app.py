import logging
from typing import Any, Callable, Dict, Optional

from flask import Flask, jsonify, request

from mortgage_sim.data_models import DEFAULT_PREPAYMENT_MONTH, MortgageInput, ReferenceRate
from mortgage_sim.engine import calculate_from_input
from mortgage_sim.errors import InvalidParameter
from mortgage_sim.formatter import result_to_dict
from mortgage_sim.utils import parse_date
from mortgage_sim_web.config import Settings
from mortgage_sim_web.rate_cache import RateCache, create_cache_from_settings
from mortgage_sim_web.rate_scraper import RateScrapingError, scrape_reference_rate

logger = logging.getLogger(__name__)

RATE_CACHE_KEY = "euribor"


def _first(payload: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = payload.get(key)
        if value is not None and value != "":
            return value
    return None


def payload_to_input(payload: Dict[str, Any]) -> MortgageInput:
    """Map a JSON body or submitted form onto a :class:`MortgageInput`.

    Accepts both the calculator's own keys (``principal``,
    ``annualInterestRatePercent``, ``termMonths``, ``prepaymentAmount``) and
    the keys of the browser form (``loanAmount``, ``interestRate``, ``term``,
    ``termType``, ``earlyRepayment``).
    """
    term = _first(payload, "term")
    term_type = _first(payload, "termType") or "years"
    if term is None and _first(payload, "termMonths") is not None:
        term = payload["termMonths"]
        term_type = "months"

    end_date = None
    raw_end = _first(payload, "endDate")
    if raw_end is not None:
        try:
            end_date = parse_date(str(raw_end))
        except ValueError as exc:
            raise InvalidParameter("end_date", str(exc)) from exc
        if term is None:
            term_type = "end_date"

    raw_month = _first(payload, "prepaymentMonth")
    try:
        prepayment_month = int(raw_month) if raw_month is not None else DEFAULT_PREPAYMENT_MONTH
    except (TypeError, ValueError) as exc:
        raise InvalidParameter("prepayment_month", "must be a whole number") from exc

    return MortgageInput(
        principal=_first(payload, "principal", "loanAmount"),
        term=term,
        term_type=str(term_type),
        interest_rate=_first(payload, "annualInterestRatePercent", "interestRate"),
        interest_type=str(_first(payload, "interestType") or "fixed"),
        differential=_first(payload, "differential"),
        end_date=end_date,
        prepayment_amount=_first(payload, "prepaymentAmount", "earlyRepayment"),
        prepayment_month=prepayment_month,
        payment_frequency=str(_first(payload, "paymentFrequency") or "monthly"),
    )


def _rate_to_dict(rate: ReferenceRate) -> Dict[str, Any]:
    return {"value": float(rate.value), "date": rate.date, "rawValue": rate.raw_value}


def create_app(
    settings: Optional[Settings] = None,
    cache: Optional[RateCache] = None,
    rate_fetcher: Optional[Callable[[], ReferenceRate]] = None,
) -> Flask:
    """Build the Flask application.

    ``cache`` and ``rate_fetcher`` default to the SQL-backed cache and the
    live scraper configured by ``settings``.
    """
    settings = settings or Settings.from_env()
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    app = Flask(__name__)
    app.config["SETTINGS"] = settings
    rate_cache = cache or create_cache_from_settings(settings.cache_url, settings.cache_ttl_seconds)

    if rate_fetcher is None:
        def rate_fetcher() -> ReferenceRate:
            return scrape_reference_rate(settings.rate_source_url, timeout=settings.http_timeout)

    def current_reference_rate() -> ReferenceRate:
        return rate_cache.get_or_fetch(RATE_CACHE_KEY, rate_fetcher)

    @app.after_request
    def add_cors_headers(response):
        response.headers["Access-Control-Allow-Origin"] = settings.cors_origin
        response.headers["Access-Control-Allow-Headers"] = "Content-Type"
        response.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
        return response

    @app.get("/")
    @app.get("/api/reference-rate")
    def reference_rate():
        try:
            rate = current_reference_rate()
        except RateScrapingError as exc:
            logger.error("Could not obtain the reference rate: %s", exc)
            return jsonify({"error": "Could not obtain the reference rate", "message": str(exc)}), 500
        return jsonify(_rate_to_dict(rate))

    @app.route("/api/calculate", methods=["POST", "OPTIONS"])
    def calculate():
        if request.method == "OPTIONS":
            return "", 204
        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            payload = request.form.to_dict()
        try:
            data = payload_to_input(payload)
            reference = None
            if data.interest_type.lower() == "variable":
                try:
                    reference = current_reference_rate()
                except RateScrapingError as exc:
                    logger.warning("Reference rate unavailable, using the submitted rate: %s", exc)
            result = calculate_from_input(data, reference_rate=reference)
        except InvalidParameter as exc:
            return jsonify({"error": "Invalid parameter", "field": exc.field, "message": str(exc)}), 400

        include_yearly = str(payload.get("includeYearly", "")).lower() in ("1", "true", "yes")
        body = result_to_dict(result, include_yearly=include_yearly)
        if reference is not None:
            body["referenceRate"] = _rate_to_dict(reference)
        return jsonify(body)

    return app


if __name__ == "__main__":
    print("Starting Mortgage Simulator web app...")
    create_app().run(host="0.0.0.0", port=8710, debug=True)
