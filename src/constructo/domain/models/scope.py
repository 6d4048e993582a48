"""ReportScope: the only input to aggregation."""

import uuid
from datetime import datetime, timedelta
from typing import Optional

from pydantic import BaseModel

from constructo.domain.enums import ReportPeriod


def period_window(period: ReportPeriod, as_of: datetime) -> tuple[datetime, datetime]:
    """Calendar-to-date window ending at ``as_of`` (week starts on Monday)."""
    day_start = as_of.replace(hour=0, minute=0, second=0, microsecond=0)
    if period == ReportPeriod.WEEKLY:
        start = day_start - timedelta(days=day_start.weekday())
    elif period == ReportPeriod.MONTHLY:
        start = day_start.replace(day=1)
    elif period == ReportPeriod.QUARTERLY:
        first_month = 3 * ((day_start.month - 1) // 3) + 1
        start = day_start.replace(month=first_month, day=1)
    else:
        start = day_start.replace(month=1, day=1)
    return start, as_of


class ReportScope(BaseModel):
    """Company, optional project and optional time window of one report."""

    company_id: uuid.UUID
    project_id: Optional[uuid.UUID] = None
    period: Optional[ReportPeriod] = None
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    as_of: Optional[datetime] = None

    def resolve(self, now: datetime) -> "ReportScope":
        """Pin the reference instant and turn ``period`` into explicit bounds.

        Called once when a concrete job is created, so that aggregating the
        stored scope later does not depend on the wall clock.
        """
        as_of = self.as_of or now
        start, end = self.start, self.end
        if self.period is not None and start is None and end is None:
            start, end = period_window(self.period, as_of)
        return self.model_copy(update={"as_of": as_of, "start": start, "end": end})

    def contains(self, moment: Optional[datetime]) -> bool:
        """True when ``moment`` falls inside the window (or there is no window)."""
        if moment is None:
            return self.start is None and self.end is None
        if self.start is not None and moment < self.start:
            return False
        if self.end is not None and moment > self.end:
            return False
        return True
