from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Mapping


class SurchargeType(str, Enum):
    MONTAGE = "MONTAGE"
    NACHT = "NACHT"
    SAMSTAG = "SAMSTAG"
    SONNTAG = "SONNTAG"
    FEIERTAG = "FEIERTAG"
    HOEHE = "HOEHE"
    SCHMUTZ = "SCHMUTZ"


class SurchargeKind(str, Enum):
    PERCENT = "PERCENT"
    FLAT = "FLAT"


@dataclass(frozen=True)
class SurchargeRate:
    kind: SurchargeKind
    # PERCENT: percent of the base hourly rate; FLAT: Rappen per hour
    value: Decimal

    @classmethod
    def percent(cls, value) -> "SurchargeRate":
        return cls(kind=SurchargeKind.PERCENT, value=Decimal(str(value)))

    @classmethod
    def flat_cents(cls, value) -> "SurchargeRate":
        return cls(kind=SurchargeKind.FLAT, value=Decimal(str(value)))


@dataclass(frozen=True)
class RateTable:
    """
    Versioned labor rate configuration.

    Passed to the surcharge resolver and the labor booking so alternative
    tables can be used without touching module globals.
    """

    version: str
    default_hourly_rate_cents: int
    surcharges: Mapping[SurchargeType, SurchargeRate] = field(default_factory=dict)

    def rate_for(self, surcharge: SurchargeType) -> SurchargeRate:
        try:
            return self.surcharges[SurchargeType(surcharge)]
        except KeyError as exc:
            raise ValueError(f"No rate configured for surcharge {surcharge} in table {self.version}") from exc


# Zuschlagssätze GAV Metallbau Schweiz
DEFAULT_RATE_TABLE = RateTable(
    version="GAV-2024",
    default_hourly_rate_cents=6500,
    surcharges={
        SurchargeType.MONTAGE: SurchargeRate.percent(15),
        SurchargeType.NACHT: SurchargeRate.percent(25),
        SurchargeType.SAMSTAG: SurchargeRate.percent(25),
        SurchargeType.SONNTAG: SurchargeRate.percent(50),
        SurchargeType.FEIERTAG: SurchargeRate.percent(100),
        SurchargeType.HOEHE: SurchargeRate.flat_cents(300),
        SurchargeType.SCHMUTZ: SurchargeRate.flat_cents(200),
    },
)
