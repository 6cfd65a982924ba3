# batches/services/validation.py

"""
Input normalizers shared by batch services.

HARD RULES:
- quantities are whole integer units (bools and fractional values rejected)
- dates are compared as calendar dates, never as formatted strings
- invalid input raises django.core.exceptions.ValidationError
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from django.core.exceptions import ValidationError
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

COST_LIMIT = Decimal("10000000000")


def to_positive_int(value, *, field: str = "quantity") -> int:
    if value is None or value == "" or isinstance(value, bool):
        raise ValidationError({field: f"{field} must be a whole number greater than zero"})

    if isinstance(value, int):
        qty = value
    elif isinstance(value, str) and value.strip().isascii() and value.strip().isdigit():
        qty = int(value.strip())
    else:
        raise ValidationError({field: f"{field} must be a whole number greater than zero"})

    if qty <= 0:
        raise ValidationError({field: f"{field} must be a whole number greater than zero"})
    return qty


def to_calendar_date(value, *, field: str):
    """
    Normalize to a datetime.date (or None).

    Aware datetimes are converted to the local calendar day first, so two
    timestamps on the same local day compare equal regardless of time-of-day.
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        if timezone.is_aware(value):
            return timezone.localtime(value).date()
        return value.date()

    if isinstance(value, date):
        return value

    if isinstance(value, str):
        raw = value.strip()
        try:
            parsed = parse_date(raw)
            if parsed is None:
                parsed_dt = parse_datetime(raw)
                if parsed_dt is not None:
                    return to_calendar_date(parsed_dt, field=field)
        except ValueError as exc:
            raise ValidationError({field: f"{field} is not a valid date"}) from exc
        if parsed is not None:
            return parsed

    raise ValidationError({field: f"{field} is not a valid date"})


def validate_date_pair(prod_date, exp_date) -> None:
    if prod_date and exp_date and exp_date <= prod_date:
        raise ValidationError({"exp_date": "exp_date must be after prod_date"})


def to_cost(value):
    if value is None or value == "":
        return None
    try:
        cost = Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise ValidationError({"cost_price": "cost_price must be a valid decimal"}) from exc

    if not cost.is_finite():
        raise ValidationError({"cost_price": "cost_price must be a valid decimal"})
    if cost < Decimal("0.00"):
        raise ValidationError({"cost_price": "cost_price cannot be negative"})
    try:
        cost = cost.quantize(Decimal("0.01"))
    except InvalidOperation as exc:
        raise ValidationError({"cost_price": "cost_price must be a valid decimal"}) from exc

    # ProductBatch.cost_price is DecimalField(max_digits=12, decimal_places=2)
    if cost >= COST_LIMIT:
        raise ValidationError({"cost_price": "cost_price is too large"})
    return cost
