"""Performance record and evaluation result models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


@dataclass(slots=True, frozen=True)
class EvaluationResult:
    """Outcome of scoring one instance's observation history.

    ``checks == 0`` with ``guess_ratio == 0.0`` is the defined result for
    too few observations, not an error.
    """

    guess_ratio: float
    checks: int


INSUFFICIENT_SAMPLES = EvaluationResult(guess_ratio=0.0, checks=0)


@dataclass(slots=True, frozen=True)
class HistorySummary:
    """Descriptive statistics over an instance's mid prices."""

    samples: int
    moving_average: float
    volatility: float


class PerformanceRecord(BaseModel):
    """Latest cumulative evaluation for one (worker, config file) pair.

    Serialized with camelCase keys (``guessRatio``, ``startDate``...).
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    fingerprint: str
    guess_ratio: float = Field(ge=0.0, le=1.0)
    checks: int = Field(ge=0)
    start_date: datetime
    end_date: datetime
    configuration: dict[str, str] = {}
    instance_id: str = ""
    config_file_name: str = ""

    def to_json_dict(self) -> dict:
        """JSON-ready dict using the on-disk key names."""
        return self.model_dump(mode="json", by_alias=True)
