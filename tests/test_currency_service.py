from decimal import Decimal

import pytest

from swiftexpense.services import currency_service


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self.payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise currency_service.requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return self.payload


@pytest.fixture
def ctx(app):
    with app.app_context():
        yield app


@pytest.fixture
def fake_get(monkeypatch):
    calls = []

    def _install(payload, status_code=200):
        def _get(url, timeout=None):
            calls.append(url)
            return FakeResponse(payload, status_code)

        monkeypatch.setattr(currency_service.requests, "get", _get)
        return calls

    return _install


def test_same_currency_is_identity(ctx):
    result = currency_service.convert_currency(Decimal("12.345"), "inr", "INR")

    assert result.converted_amount == Decimal("12.35")
    assert result.exchange_rate == Decimal("1")
    assert result.success is True


def test_live_rates_are_used_and_cached(ctx, fake_get):
    calls = fake_get({"base": "USD", "rates": {"INR": 83.5, "EUR": 0.92}})

    first = currency_service.convert_currency(10, "USD", "INR")
    second = currency_service.convert_currency(3, "USD", "EUR")

    assert first.converted_amount == Decimal("835.00")
    assert second.converted_amount == Decimal("2.76")
    assert calls == ["https://api.exchangerate-api.com/v4/latest/USD"]


def test_cache_expires(ctx, fake_get):
    ctx.config["EXTERNAL_API_CACHE_SECONDS"] = 0
    calls = fake_get({"base": "USD", "rates": {"INR": 83.5}})

    currency_service.fetch_exchange_rates("USD")
    currency_service.fetch_exchange_rates("USD")

    assert len(calls) == 2


def test_offline_fallback_rates(ctx):
    result = currency_service.convert_currency(1000, "INR", "USD")

    assert result.converted_amount == Decimal("12.00")
    assert result.success is True


def test_unknown_rate_returns_original_amount(ctx):
    result = currency_service.convert_currency(Decimal("99.99"), "JPY", "INR")

    assert result.converted_amount == Decimal("99.99")
    assert result.exchange_rate == Decimal("1")
    assert result.success is False
    assert result.to_dict() == {"converted_amount": 99.99, "exchange_rate": 1.0, "success": False}


def test_malformed_rates_payload_falls_back(ctx, fake_get):
    fake_get({"unexpected": True})

    rates = currency_service.fetch_exchange_rates("INR")
    assert rates["base"] == "INR"
    assert rates["rates"]["USD"] == 0.012
    assert currency_service.fetch_exchange_rates("USD") is None


def test_http_error_falls_back(ctx, fake_get):
    fake_get({}, status_code=503)
    rates = currency_service.fetch_exchange_rates("INR")
    assert rates["rates"]["USD"] == 0.012


def test_countries_from_service(ctx, fake_get):
    fake_get(
        [
            {"name": {"common": "Japan", "official": "Japan"}, "currencies": {"JPY": {"name": "Japanese yen", "symbol": "¥"}}},
            {"name": {"common": "Antarctica", "official": "Antarctica"}, "currencies": {}},
        ]
    )

    assert currency_service.get_currency_for_country("japan") == "JPY"
    assert currency_service.get_currency_for_country("Antarctica") is None
    assert currency_service.get_country_choices() == [
        {"name": "Antarctica", "currency_code": None},
        {"name": "Japan", "currency_code": "JPY"},
    ]
    assert currency_service.get_supported_currencies() == [{"code": "JPY", "name": "Japanese yen", "symbol": "¥"}]


def test_countries_fallback(ctx):
    assert currency_service.get_currency_for_country("Republic of India") == "INR"
    assert currency_service.get_currency_for_country("Atlantis") is None
