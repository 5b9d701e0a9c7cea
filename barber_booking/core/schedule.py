# barber_booking/core/schedule.py

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from barber_booking.errors import ConfigurationError

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

HHMM_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


def to_minutes(value: str) -> int:
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def to_hhmm(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


class BreakTime(BaseModel):
    start_time: str = Field(pattern=HHMM_PATTERN)
    end_time: str = Field(pattern=HHMM_PATTERN)


class WorkingDay(BaseModel):
    day: str
    enabled: bool = True
    start_time: str = Field(pattern=HHMM_PATTERN)
    end_time: str = Field(pattern=HHMM_PATTERN)
    breaks: List[BreakTime] = Field(default_factory=list)

    @field_validator("day")
    @classmethod
    def known_weekday(cls, v: str) -> str:
        name = v.strip().capitalize()
        if name not in WEEKDAYS:
            raise ValueError(f"day must be one of {', '.join(WEEKDAYS)}")
        return name


class ScheduleConfig(BaseModel):
    """A barber's weekly working-hours template, Monday first."""

    working_hours: List[WorkingDay]

    def day_for(self, weekday: int) -> Optional[WorkingDay]:
        # weekday follows date.weekday(): 0 = Monday
        name = WEEKDAYS[weekday]
        for wd in self.working_hours:
            if wd.day == name:
                return wd
        return None


def default_schedule() -> ScheduleConfig:
    days = []
    for name in WEEKDAYS:
        if name in ("Saturday", "Sunday"):
            days.append(WorkingDay(day=name, enabled=False, start_time="10:00", end_time="14:00"))
        else:
            days.append(WorkingDay(day=name, enabled=True, start_time="09:00", end_time="17:00"))
    return ScheduleConfig(working_hours=days)


def check_day(wd: WorkingDay) -> None:
    start = to_minutes(wd.start_time)
    end = to_minutes(wd.end_time)
    if start >= end:
        raise ConfigurationError(f"{wd.day}: start_time must be before end_time")

    previous_end = None
    for brk in sorted(wd.breaks, key=lambda b: to_minutes(b.start_time)):
        b_start = to_minutes(brk.start_time)
        b_end = to_minutes(brk.end_time)
        if b_start >= b_end:
            raise ConfigurationError(f"{wd.day}: break {brk.start_time}-{brk.end_time} is empty")
        if b_start < start or b_end > end:
            raise ConfigurationError(
                f"{wd.day}: break {brk.start_time}-{brk.end_time} is outside working hours"
            )
        if previous_end is not None and b_start < previous_end:
            raise ConfigurationError(f"{wd.day}: breaks overlap at {brk.start_time}")
        previous_end = b_end


def validate_schedule(config: ScheduleConfig) -> None:
    """Raise ConfigurationError on the first invariant a schedule breaks."""
    seen = set()
    for wd in config.working_hours:
        if wd.day in seen:
            raise ConfigurationError(f"{wd.day} appears more than once")
        seen.add(wd.day)
        check_day(wd)
    if len(seen) != len(WEEKDAYS):
        missing = [d for d in WEEKDAYS if d not in seen]
        raise ConfigurationError(f"missing days: {', '.join(missing)}")
