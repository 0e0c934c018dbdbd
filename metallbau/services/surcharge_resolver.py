from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, List, Optional, Tuple

from metallbau.core.rates import DEFAULT_RATE_TABLE, RateTable, SurchargeKind, SurchargeType
from metallbau.services.errors import InvalidRequestError

WORK_LOCATION_WERKSTATT = "WERKSTATT"
WORK_LOCATION_BAUSTELLE = "BAUSTELLE"
WORK_LOCATIONS = (WORK_LOCATION_WERKSTATT, WORK_LOCATION_BAUSTELLE)

_CENT = Decimal("1")
_MINUTES_PER_HOUR = Decimal(60)


@dataclass(frozen=True)
class SurchargeLine:
    surcharge_type: SurchargeType
    surcharge_percent: Optional[Decimal]
    surcharge_amount_cents: Optional[int]


@dataclass(frozen=True)
class LaborCost:
    base_hourly_rate_cents: int
    surcharge_total_cents: int
    effective_hourly_rate_cents: int
    total_cost_cents: int
    lines: Tuple[SurchargeLine, ...]


def _to_cents(value: Decimal) -> int:
    return int(value.quantize(_CENT, rounding=ROUND_HALF_UP))


def applied_surcharges(
    surcharges: Iterable[SurchargeType | str],
    work_location: str,
) -> List[SurchargeType]:
    """
    Resolve the surcharge set for a booking.

    Explicit surcharges are de-duplicated; work on a BAUSTELLE always adds
    MONTAGE (a set union, so an explicit MONTAGE is never counted twice).
    Returned in table order for stable detail rows.
    """
    try:
        applied = {SurchargeType(s) for s in surcharges}
    except ValueError as exc:
        raise InvalidRequestError(f"Unknown surcharge type: {exc}") from exc

    if work_location == WORK_LOCATION_BAUSTELLE:
        applied |= {SurchargeType.MONTAGE}

    return [s for s in SurchargeType if s in applied]


def resolve_labor_cost(
    *,
    duration_minutes: int,
    surcharges: Iterable[SurchargeType | str] = (),
    work_location: str = WORK_LOCATION_WERKSTATT,
    base_hourly_rate_cents: Optional[int] = None,
    rates: RateTable = DEFAULT_RATE_TABLE,
) -> LaborCost:
    """
    Cost a labor booking.

      hours                 = minutes / 60
      percent surcharge     = base * pct/100 * hours
      flat surcharge        = flat * hours
      effective_hourly_rate = base + surcharge_total / hours
      total_cost            = base * hours + surcharge_total

    Arithmetic is exact Decimal; results are rounded half-up to whole Rappen
    only at the end.
    """
    if duration_minutes is None or int(duration_minutes) <= 0:
        raise InvalidRequestError("duration_minutes must be greater than 0")
    if work_location not in WORK_LOCATIONS:
        raise InvalidRequestError(f"Unknown work_location: {work_location}")

    # 0 or missing falls back to the table default rate
    base = Decimal(base_hourly_rate_cents or rates.default_hourly_rate_cents)
    if base < 0:
        raise InvalidRequestError("base_hourly_rate_cents must not be negative")

    hours = Decimal(int(duration_minutes)) / _MINUTES_PER_HOUR

    surcharge_total = Decimal(0)
    lines: List[SurchargeLine] = []
    for surcharge in applied_surcharges(surcharges, work_location):
        try:
            rate = rates.rate_for(surcharge)
        except ValueError as exc:
            raise InvalidRequestError(str(exc)) from exc

        if rate.kind == SurchargeKind.PERCENT:
            surcharge_total += base * (rate.value / Decimal(100)) * hours
            lines.append(SurchargeLine(surcharge, rate.value, None))
        else:
            amount = rate.value * hours
            surcharge_total += amount
            lines.append(SurchargeLine(surcharge, None, _to_cents(amount)))

    return LaborCost(
        base_hourly_rate_cents=int(base),
        surcharge_total_cents=_to_cents(surcharge_total),
        effective_hourly_rate_cents=_to_cents(base + surcharge_total / hours),
        total_cost_cents=_to_cents(base * hours + surcharge_total),
        lines=tuple(lines),
    )
