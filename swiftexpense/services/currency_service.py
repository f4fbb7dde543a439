"""Currency conversion and country metadata from external services.

Both lookups are plain time-boxed GET requests. Successful responses are
cached in-process for ``EXTERNAL_API_CACHE_SECONDS``; when a service is
unreachable the static fallback tables below are served instead.
"""
from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Tuple

import requests
from flask import current_app

from swiftexpense.utils.dates import utcnow

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal("0.01")

FALLBACK_COUNTRIES: List[Dict[str, Any]] = [
    {
        "name": {"common": "India", "official": "Republic of India"},
        "currencies": {"INR": {"name": "Indian rupee", "symbol": "₹"}},
    },
    {
        "name": {"common": "United States", "official": "United States of America"},
        "currencies": {"USD": {"name": "United States dollar", "symbol": "$"}},
    },
    {
        "name": {"common": "United Kingdom", "official": "United Kingdom of Great Britain and Northern Ireland"},
        "currencies": {"GBP": {"name": "British pound", "symbol": "£"}},
    },
    {
        "name": {"common": "European Union", "official": "European Union"},
        "currencies": {"EUR": {"name": "Euro", "symbol": "€"}},
    },
]

FALLBACK_RATES: Dict[str, Dict[str, float]] = {
    "INR": {"USD": 0.012, "EUR": 0.011, "GBP": 0.0095, "INR": 1},
}

FALLBACK_CURRENCIES: List[Dict[str, str]] = [
    {"code": "INR", "name": "Indian rupee", "symbol": "₹"},
    {"code": "USD", "name": "United States dollar", "symbol": "$"},
    {"code": "EUR", "name": "Euro", "symbol": "€"},
    {"code": "GBP", "name": "British pound", "symbol": "£"},
    {"code": "AUD", "name": "Australian dollar", "symbol": "A$"},
    {"code": "CAD", "name": "Canadian dollar", "symbol": "C$"},
    {"code": "JPY", "name": "Japanese yen", "symbol": "¥"},
    {"code": "SGD", "name": "Singapore dollar", "symbol": "S$"},
]

_cache: Dict[str, Tuple[float, Any]] = {}
_cache_lock = threading.Lock()


@dataclass(frozen=True)
class ConversionResult:
    converted_amount: Decimal
    exchange_rate: Decimal
    success: bool

    def to_dict(self) -> dict:
        return {
            "converted_amount": float(self.converted_amount),
            "exchange_rate": float(self.exchange_rate),
            "success": self.success,
        }


def clear_cache() -> None:
    with _cache_lock:
        _cache.clear()


def _cache_get(key: str) -> Optional[Any]:
    ttl = current_app.config.get("EXTERNAL_API_CACHE_SECONDS", 3600)
    with _cache_lock:
        entry = _cache.get(key)
        if entry is None:
            return None
        stored_at, value = entry
        if time.monotonic() - stored_at >= ttl:
            del _cache[key]
            return None
        return value


def _cache_set(key: str, value: Any) -> None:
    with _cache_lock:
        _cache[key] = (time.monotonic(), value)


def _get_json(url: str) -> Any:
    response = requests.get(url, timeout=current_app.config.get("EXTERNAL_API_TIMEOUT", 10))
    response.raise_for_status()
    return response.json()


def get_countries() -> List[Dict[str, Any]]:
    """Return countries with their currencies, cached, with a static fallback."""
    cached = _cache_get("countries")
    if cached is not None:
        return cached

    try:
        countries = _get_json(current_app.config["COUNTRIES_API_URL"])
    except (requests.RequestException, ValueError) as exc:
        logger.warning("Failed to fetch country data: %s", exc)
        return FALLBACK_COUNTRIES

    if not isinstance(countries, list) or not countries:
        logger.warning("Country service returned an unexpected payload")
        return FALLBACK_COUNTRIES

    _cache_set("countries", countries)
    return countries


def get_country_choices() -> List[Dict[str, Optional[str]]]:
    choices = []
    for entry in get_countries():
        name = (entry.get("name") or {}).get("common")
        if not name:
            continue
        currencies = entry.get("currencies") or {}
        code = next(iter(currencies), None)
        choices.append({"name": name, "currency_code": code})
    return sorted(choices, key=lambda item: item["name"])


def get_currency_for_country(country_name: str) -> Optional[str]:
    """Return the primary currency code of a country, or None when unknown."""
    target = country_name.strip().lower()
    for entry in get_countries():
        names = entry.get("name") or {}
        if target in {str(names.get("common", "")).lower(), str(names.get("official", "")).lower()}:
            currencies = entry.get("currencies") or {}
            return next(iter(currencies), None)
    return None


def get_supported_currencies() -> List[Dict[str, Optional[str]]]:
    currencies: Dict[str, Dict[str, Any]] = {}
    for entry in get_countries():
        for code, details in (entry.get("currencies") or {}).items():
            currencies[code] = details or {}

    if not currencies:
        return FALLBACK_CURRENCIES

    return [
        {"code": code, "name": details.get("name"), "symbol": details.get("symbol")}
        for code, details in sorted(currencies.items())
    ]


def _fallback_rates(base: str) -> Optional[Dict[str, Any]]:
    fallback = FALLBACK_RATES.get(base)
    if fallback is None:
        return None
    return {"base": base, "date": utcnow().date().isoformat(), "rates": dict(fallback)}


def fetch_exchange_rates(base_currency: str) -> Optional[Dict[str, Any]]:
    """Fetch exchange rates for the given base currency."""
    base = base_currency.upper()
    cache_key = f"rates:{base}"
    cached = _cache_get(cache_key)
    if cached is not None:
        return cached

    try:
        payload = _get_json(current_app.config["EXCHANGE_API_URL"].format(base=base))
    except (requests.RequestException, ValueError) as exc:
        logger.warning("Failed to fetch exchange rates for %s: %s", base, exc)
        return _fallback_rates(base)

    if not isinstance(payload, dict) or not isinstance(payload.get("rates"), dict):
        logger.warning("Exchange-rate service returned an unexpected payload for %s", base)
        return _fallback_rates(base)

    _cache_set(cache_key, payload)
    return payload


def convert_currency(amount: Decimal | float | int, source_currency: str, target_currency: str) -> ConversionResult:
    """Convert an amount between currencies.

    Failures never raise: the original amount is returned with a rate of 1
    and ``success`` set to False.
    """
    amount = Decimal(str(amount))
    source = source_currency.upper()
    target = target_currency.upper()

    if source == target:
        return ConversionResult(amount.quantize(TWO_PLACES, rounding=ROUND_HALF_UP), Decimal("1"), True)

    rates = fetch_exchange_rates(source)
    raw_rate = (rates or {}).get("rates", {}).get(target)
    try:
        rate = Decimal(str(raw_rate)) if raw_rate is not None else None
    except InvalidOperation:
        rate = None

    if not rate:
        logger.warning("Exchange rate not found for %s to %s", source, target)
        return ConversionResult(amount.quantize(TWO_PLACES, rounding=ROUND_HALF_UP), Decimal("1"), False)

    converted = (amount * rate).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    return ConversionResult(converted, rate, True)
