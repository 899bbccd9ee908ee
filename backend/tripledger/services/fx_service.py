"""
Foreign exchange service for currency conversion.

Rates are expressed as base currency per one unit of the expense currency,
so ``converted = amount * rate``. Conversion itself is pure; only the rate
lookup touches the network or the database, and it runs once per expense
at creation time.
"""
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional, Union
from tripledger.core.config import settings
from tripledger.core.currency import normalize_currency
from tripledger.models.exchange_rate import FxRate
from tripledger.schemas.expense import ConversionResult, ExpenseRecord
import httpx
import logging

logger = logging.getLogger(__name__)

RateLike = Union[Decimal, float, int, str]


def _to_decimal(rate: RateLike) -> Decimal:
    if isinstance(rate, Decimal):
        return rate
    # str() first so that floats like 1.1 stay 1.1 rather than their binary expansion
    return Decimal(str(rate))


def convert_minor_units(amount: int, rate: RateLike) -> int:
    """
    Apply an FX rate to a minor-unit amount.

    Rounds to the nearest minor unit, halves away from zero (ROUND_HALF_UP),
    which matches ``Math.round`` for the positive amounts the ledger stores.
    """
    converted = Decimal(amount) * _to_decimal(rate)
    return int(converted.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def convert_expense_to_base_currency(expense: ExpenseRecord, base_currency: str) -> ConversionResult:
    """
    Convert an expense amount to the trip base currency.

    Never raises. A foreign-currency expense without a stored rate comes back
    with ``amount=0`` and ``needs_fx_rate=True``; callers must check the flag
    before trusting the amount.
    """
    base = normalize_currency(base_currency)

    if normalize_currency(expense.currency) == base:
        return ConversionResult(amount=expense.amount, currency=base, needs_fx_rate=False)

    if expense.fx_rate is None:
        return ConversionResult(amount=0, currency=base, needs_fx_rate=True)

    return ConversionResult(
        amount=convert_minor_units(expense.amount, expense.fx_rate),
        currency=base,
        needs_fx_rate=False,
    )


def calculate_inverse_rate(rate: RateLike) -> Decimal:
    """Inverse of a rate, e.g. EUR->USD 1.25 gives USD->EUR 0.8."""
    value = _to_decimal(rate)
    if value == 0:
        raise ValueError("Cannot calculate inverse of zero rate")
    return Decimal(1) / value


def format_date_for_fx(value: Union[date, datetime, str]) -> str:
    """Format a date, datetime or ISO string as YYYY-MM-DD."""
    if isinstance(value, str):
        return value.split("T")[0]
    if isinstance(value, datetime):
        return value.date().isoformat()
    return value.isoformat()


def lookup_rate(
    base_currency: str,
    target_currency: str,
    on_date: date,
    client: Optional[httpx.Client] = None
) -> Optional[Decimal]:
    """
    Fetch a rate from ExchangeRate-API v6.
    Returns base currency per 1 unit of target currency, or None on any failure.

    Uses /latest/{currency} for today's date, /history/{currency}/{year}/{month}/{day}
    for historical dates.

    API Documentation:
    - Latest: https://www.exchangerate-api.com/docs/latest-rates
    - Historical: https://www.exchangerate-api.com/docs/historical-data-requests
    """
    base_upper = normalize_currency(base_currency)
    target_upper = normalize_currency(target_currency)

    if base_upper == target_upper:
        return Decimal(1)

    if not settings.FX_API_KEY:
        logger.error("FX_API_KEY is not configured; cannot fetch %s rate", target_upper)
        return None

    api_root = f"{settings.FX_API_URL.rstrip('/')}/{settings.FX_API_KEY}"
    if on_date >= date.today():
        api_url = f"{api_root}/latest/{target_upper}"
    else:
        api_url = f"{api_root}/history/{target_upper}/{on_date.year}/{on_date.month}/{on_date.day}"
    logger.info("Fetching exchange rate %s->%s for %s", target_upper, base_upper, on_date)

    http = client or httpx
    try:
        response = http.get(api_url, timeout=settings.FX_TIMEOUT_SECONDS)
        response.raise_for_status()
        data = response.json()
    except httpx.HTTPStatusError as e:
        logger.error("HTTP error with ExchangeRate-API: %s", e.response.status_code)
        return None
    except httpx.HTTPError as e:
        # Network errors and timeouts
        logger.error("Network error with ExchangeRate-API: %s", e)
        return None
    except ValueError:
        logger.error("ExchangeRate-API returned a non-JSON body")
        return None

    if settings.DEBUG:
        logger.debug("ExchangeRate-API response: %s", data)

    if data.get("result") != "success":
        logger.error("ExchangeRate-API returned error: %s", data.get("error-type", "Unknown error"))
        return None

    # {"conversion_rates": {"EUR": 0.92, ...}} with the requested currency as 1 unit
    raw_rate = (data.get("conversion_rates") or {}).get(base_upper)
    if raw_rate is None:
        logger.error("%s not found in conversion_rates", base_upper)
        return None

    try:
        rate = _to_decimal(raw_rate)
    except InvalidOperation:
        logger.error("Malformed rate in ExchangeRate-API response: %r", raw_rate)
        return None

    if rate <= 0:
        logger.error("Invalid rate: %s", rate)
        return None

    logger.info("Fetched rate: 1 %s = %s %s", target_upper, rate, base_upper)
    return rate


def get_fx_rate(
    db: Session,
    base_currency: str,
    target_currency: str,
    on_date: date,
    fetch: bool = True,
    client: Optional[httpx.Client] = None
) -> Optional[Decimal]:
    """
    Get the rate for target_currency in base_currency on a date.

    Checks the fx_rates cache first; on a miss, fetches from the API (when
    ``fetch`` is set) and caches the result. Returns None when unavailable.
    """
    base_upper = normalize_currency(base_currency)
    target_upper = normalize_currency(target_currency)

    if base_upper == target_upper:
        return Decimal(1)

    cached = db.query(FxRate).filter(
        FxRate.base_currency == base_upper,
        FxRate.target_currency == target_upper,
        FxRate.date == on_date
    ).first()

    if cached:
        return _to_decimal(cached.rate)

    rate = lookup_rate(base_upper, target_upper, on_date, client=client) if fetch else None

    if rate is None:
        logger.warning("FX rate unavailable for %s->%s on %s", target_upper, base_upper, on_date)
        return None

    db.add(FxRate(
        base_currency=base_upper,
        target_currency=target_upper,
        date=on_date,
        rate=rate
    ))
    try:
        db.commit()
    except IntegrityError:
        # Another request cached the same rate first
        db.rollback()
        logger.info("FX rate %s->%s on %s already cached", target_upper, base_upper, on_date)

    return rate
