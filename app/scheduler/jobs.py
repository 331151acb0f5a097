"""
app/scheduler/jobs.py

APScheduler-based registry of recurring source refresh jobs.

One cron job exists per resolved source URL; the job id is the URL itself.
Rescheduling is always remove-then-add: a job is never modified in place,
so a stale pattern can never keep firing next to its replacement.

Cron patterns
-------------
Patterns use crontab syntax with five fields, or six fields with a leading
seconds field. Numeric day-of-week values follow crontab numbering
(0 and 7 are Sunday) and are translated to APScheduler's Monday-based
numbering by expanding them to day names.

Lifecycle
----------
``build_scheduler()`` returns a configured but *not yet started*
``BackgroundScheduler``. Jobs may be registered before it starts; they begin
firing once the app lifespan calls ``.start()``.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from apscheduler.job import Job
from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.schedulers.base import BaseScheduler
from apscheduler.triggers.cron import CronTrigger

from app.domain.errors import ConfigurationError, DuplicateJobError

logger = logging.getLogger(__name__)

_DAY_NAMES: tuple[str, ...] = ("sun", "mon", "tue", "wed", "thu", "fri", "sat")

# Scheduled firings later than this are dropped; the next firing catches up.
_MISFIRE_GRACE_SECONDS = 300


# ---------------------------------------------------------------------------
# Cron parsing
# ---------------------------------------------------------------------------


def _day_index(token: str) -> int:
    normalized = token.strip().lower()
    if normalized.isdigit():
        value = int(normalized)
        if value > 7:
            raise ValueError(f"Day-of-week value out of range: {token!r}")
        return value
    if normalized in _DAY_NAMES:
        return _DAY_NAMES.index(normalized)
    raise ValueError(f"Unknown day-of-week value: {token!r}")


def cron_day_of_week(field: str) -> str:
    """
    Translate a crontab day-of-week field into an APScheduler expression.
    """

    if field in ("*", "?"):
        return "*"

    days: list[str] = []
    for element in field.split(","):
        base, has_step, step_raw = element.partition("/")
        step = int(step_raw) if has_step else 1
        if step < 1:
            raise ValueError(f"Invalid day-of-week step: {element!r}")

        if base in ("*", "?"):
            start, end = 0, 6
        elif "-" in base:
            first, last = base.split("-", 1)
            start, end = _day_index(first), _day_index(last)
            if end == 0 and start > 0:
                end = 7
        else:
            start = _day_index(base)
            end = 6 if has_step else start

        if start > end:
            raise ValueError(f"Invalid day-of-week range: {element!r}")
        days.extend(_DAY_NAMES[day % 7] for day in range(start, end + 1, step))

    return ",".join(dict.fromkeys(days))


def build_cron_trigger(pattern: str, timezone: str) -> CronTrigger:
    """
    Build a ``CronTrigger`` from a five- or six-field crontab pattern.

    Raises ValueError for malformed patterns and KeyError subclasses for
    unknown timezones (both surface from APScheduler as well).
    """

    fields = pattern.split()
    if len(fields) == 5:
        second = "0"
        minute, hour, day, month, day_of_week = fields
    elif len(fields) == 6:
        second, minute, hour, day, month, day_of_week = fields
    else:
        raise ValueError(f"Cron pattern must have 5 or 6 fields, got {len(fields)}: {pattern!r}")

    return CronTrigger(
        second=second,
        minute=minute,
        hour=hour,
        day=day,
        month=month,
        day_of_week=cron_day_of_week(day_of_week),
        timezone=timezone,
    )


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ScheduledJob:
    """
    One live recurring refresh job.
    """

    url: str
    cron_pattern: str
    cron_timezone: str
    job: Job

    @property
    def next_run_time(self) -> datetime | None:
        # Jobs added before the scheduler starts have no next_run_time yet.
        return getattr(self.job, "next_run_time", None)


class JobRegistry:
    """
    Maps each resolved source URL to its single live cron job.
    """

    def __init__(
        self,
        *,
        scheduler: BaseScheduler,
        refresh: Callable[[str], object],
        default_timezone: str = "UTC",
    ) -> None:
        self._scheduler = scheduler
        self._refresh = refresh
        self._default_timezone = default_timezone
        self._jobs: dict[str, ScheduledJob] = {}
        self._lock = threading.RLock()

    def build_trigger(self, pattern: str, timezone: str | None = None) -> CronTrigger:
        """
        Validate a schedule and return its trigger without registering anything.
        """

        effective_timezone = timezone or self._default_timezone
        try:
            return build_cron_trigger(pattern, effective_timezone)
        except (ValueError, KeyError) as exc:
            raise ConfigurationError(
                f"Invalid cron schedule pattern={pattern!r} timezone={effective_timezone!r}: {exc}"
            ) from exc

    def add(self, url: str, pattern: str, timezone: str | None = None) -> ScheduledJob:
        """
        Register a recurring refresh of ``url``.

        Raises DuplicateJobError if ``url`` already has a job; callers must
        ``remove`` first.
        """

        trigger = self.build_trigger(pattern, timezone)
        with self._lock:
            if url in self._jobs:
                raise DuplicateJobError(f"A refresh job already exists for {url}.")
            job = self._scheduler.add_job(
                self._refresh,
                trigger=trigger,
                args=[url],
                id=url,
                name=f"refresh {url}",
                max_instances=1,
                coalesce=True,
                misfire_grace_time=_MISFIRE_GRACE_SECONDS,
            )
            scheduled = ScheduledJob(
                url=url,
                cron_pattern=pattern,
                cron_timezone=timezone or self._default_timezone,
                job=job,
            )
            self._jobs[url] = scheduled
        logger.info("Refresh job added url=%s pattern=%r timezone=%s", url, pattern, scheduled.cron_timezone)
        return scheduled

    def remove(self, url: str) -> bool:
        """
        Stop and deregister the job for ``url``. Returns False if none existed.
        """

        with self._lock:
            scheduled = self._jobs.pop(url, None)
            if scheduled is None:
                return False
            try:
                self._scheduler.remove_job(scheduled.job.id)
            except JobLookupError:
                logger.warning("Refresh job already gone from scheduler url=%s", url)
        logger.info("Refresh job removed url=%s", url)
        return True

    def remove_all(self) -> None:
        for url in self.urls():
            self.remove(url)

    def trigger_now(self, url: str) -> None:
        """
        Queue one out-of-schedule refresh of ``url`` on the shared scheduler.
        """

        self._scheduler.add_job(
            self._refresh,
            trigger="date",
            args=[url],
            name=f"warm-up {url}",
            misfire_grace_time=None,
        )
        logger.info("Immediate refresh queued url=%s", url)

    def has(self, url: str) -> bool:
        with self._lock:
            return url in self._jobs

    def get(self, url: str) -> ScheduledJob | None:
        with self._lock:
            return self._jobs.get(url)

    def urls(self) -> list[str]:
        with self._lock:
            return list(self._jobs)

    def jobs(self) -> list[ScheduledJob]:
        with self._lock:
            return list(self._jobs.values())


def build_scheduler(*, timezone: str = "UTC") -> BackgroundScheduler:
    """
    Return a configured but *not yet started* ``BackgroundScheduler``.

    The caller must call ``.start()`` and ``.shutdown(wait=True)`` at the
    appropriate lifecycle points.
    """

    return BackgroundScheduler(timezone=timezone)
