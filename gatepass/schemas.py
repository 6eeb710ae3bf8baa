from decimal import Decimal
from enum import Enum
from typing import Annotated, Optional

from pydantic import BaseModel, PlainSerializer
from pydantic.alias_generators import to_camel

# Money travels as a JSON number, in major currency units
Amount = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class TicketTier(str, Enum):
    """Ticket tier enumeration"""
    DAY_PASS = "day-pass"
    SEASON_PASS = "season-pass"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @property
    def serial_prefix(self) -> str:
        return _SERIAL_PREFIXES[self]

    @classmethod
    def normalize(cls, value: str) -> Optional["TicketTier"]:
        """Resolve a slug, display name or underscore form to a tier."""
        key = "-".join(str(value).strip().lower().replace("_", " ").replace("-", " ").split())
        for tier in cls:
            if key in (tier.value, tier.value.replace("-", "")):
                return tier
        return None

    @classmethod
    def from_display_name(cls, display_name: str) -> Optional["TicketTier"]:
        for tier in cls:
            if tier.display_name == display_name:
                return tier
        return None


_DISPLAY_NAMES = {
    TicketTier.DAY_PASS: "Day Pass",
    TicketTier.SEASON_PASS: "Season Pass",
}

_SERIAL_PREFIXES = {
    TicketTier.DAY_PASS: "DP",
    TicketTier.SEASON_PASS: "SP",
}


class CamelModel(BaseModel):
    """Base model rendered with camelCase keys on the wire."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True

