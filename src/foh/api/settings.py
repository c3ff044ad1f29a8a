from __future__ import annotations

import os
from decimal import Decimal, InvalidOperation
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


def app_env() -> str:
    return os.getenv("APP_ENV", "dev").lower()


def currency() -> str:
    value = os.getenv("FOH_CURRENCY", "INR").strip().upper()
    if len(value) != 3 or not value.isalpha():
        raise RuntimeError(f"FOH_CURRENCY must be a 3-letter code, got {value!r}")
    return value


def restaurant_timezone() -> ZoneInfo:
    name = os.getenv("FOH_TIMEZONE", "UTC")
    try:
        return ZoneInfo(name)
    except ZoneInfoNotFoundError as exc:
        raise RuntimeError(f"FOH_TIMEZONE is not a known time zone: {name}") from exc


def default_tax_percent() -> Decimal:
    raw = os.getenv("FOH_DEFAULT_TAX_PERCENT", "5")
    try:
        value = Decimal(raw)
    except InvalidOperation as exc:
        raise RuntimeError(f"FOH_DEFAULT_TAX_PERCENT is not a number: {raw}") from exc
    if value < 0 or value > 100:
        raise RuntimeError("FOH_DEFAULT_TAX_PERCENT must be between 0 and 100")
    if value.as_tuple().exponent < -2:
        raise RuntimeError("FOH_DEFAULT_TAX_PERCENT allows at most two decimal places")
    return value


def cors_allow_origins() -> list[str]:
    raw_value = os.getenv("CORS_ALLOW_ORIGINS", "")
    return [origin.strip() for origin in raw_value.split(",") if origin.strip()]
