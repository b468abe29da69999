from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
from functools import lru_cache

from timegrid.core.exceptions import ResourceNotFoundError
from timegrid.services.time_model import time_to_minutes


@dataclass(frozen=True)
class Period:
    id: str
    start: str
    end: str
    display: str | None = None
    is_break: bool = False

    @property
    def label(self) -> str:
        return f"{self.start} - {self.end}"

    @property
    def start_minutes(self) -> int:
        return time_to_minutes(self.start)

    @property
    def end_minutes(self) -> int:
        return time_to_minutes(self.end)


class PeriodTable(Sequence):
    """Ordered, read-only list of the periods in a school day."""

    def __init__(self, periods: Iterable[Period]) -> None:
        self._periods: tuple[Period, ...] = tuple(periods)
        self._by_id = {period.id: period for period in self._periods}
        if len(self._by_id) != len(self._periods):
            raise ValueError("Period ids must be unique")
        previous_end = None
        for period in self._periods:
            if period.end_minutes <= period.start_minutes:
                raise ValueError(f"Period {period.id} must end after it starts")
            if previous_end is not None and period.start_minutes < previous_end:
                raise ValueError(f"Period {period.id} overlaps the previous period")
            previous_end = period.end_minutes

    def __getitem__(self, index):
        return self._periods[index]

    def __len__(self) -> int:
        return len(self._periods)

    def get(self, period_id: str) -> Period:
        try:
            return self._by_id[period_id]
        except KeyError:
            raise ResourceNotFoundError("Period", period_id) from None

    def teaching_periods(self) -> Iterator[Period]:
        return (period for period in self._periods if not period.is_break)

    @property
    def day_start(self) -> str:
        return self._periods[0].start

    @property
    def day_end(self) -> str:
        return self._periods[-1].end


SCHOOL_DAY_PERIODS = (
    Period("p0", "07:30", "07:45"),
    Period("p1", "08:00", "09:00", display="1"),
    Period("p2", "09:00", "10:00", display="2"),
    Period("b1", "10:00", "10:20", is_break=True),
    Period("p3", "10:20", "11:20", display="3"),
    Period("p4", "11:20", "12:20", display="4"),
    Period("p5", "12:20", "13:10", display="5"),
    Period("b2", "13:10", "13:15", is_break=True),
    Period("p6", "13:15", "14:15", display="6"),
    Period("end", "14:15", "14:30", is_break=True),
)


@lru_cache
def get_period_table() -> PeriodTable:
    return PeriodTable(SCHOOL_DAY_PERIODS)
