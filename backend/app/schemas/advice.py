from __future__ import annotations

from pydantic import Field

from .base import CamelModel, UtcDateTime


class DateRange(CamelModel):
    from_: UtcDateTime = Field(..., alias="from")
    to: UtcDateTime


class AdviceBasis(CamelModel):
    logs_analyzed: int
    date_range: DateRange


class AdviceResponse(CamelModel):
    advice: str
    based_on: AdviceBasis
