from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Tuple

DEFAULT_TIME_SLOTS = ("10:00", "10:40", "11:20", "12:00", "12:40", "13:20", "14:00", "14:20")

# Monday=0 ... Wednesday=2
MON_TO_WED = (0, 1, 2)


@dataclass(frozen=True)
class BookingPolicy:
    """Process-wide booking rules, read once from the app config."""

    capacity_mon_wed: int = 2
    capacity_thu_sun: int = 3
    booking_window_days: int = 90
    same_day_cutoff_hours: int = 2
    slot_duration_minutes: int = 40
    time_slots: Tuple[str, ...] = DEFAULT_TIME_SLOTS
    max_admission_attempts: int = 5
    max_range_days: int = 93
    max_report_days: int = 366

    @classmethod
    def from_config(cls, config) -> "BookingPolicy":
        return cls(
            capacity_mon_wed=int(config.get("CAPACITY_MON_WED", 2)),
            capacity_thu_sun=int(config.get("CAPACITY_THU_SUN", 3)),
            booking_window_days=int(config.get("BOOKING_WINDOW_DAYS", 90)),
            same_day_cutoff_hours=int(config.get("SAME_DAY_CUTOFF_HOURS", 2)),
            slot_duration_minutes=int(config.get("SLOT_DURATION_MINUTES", 40)),
            time_slots=tuple(config.get("TIME_SLOTS", DEFAULT_TIME_SLOTS)),
            max_admission_attempts=max(1, int(config.get("ADMISSION_MAX_ATTEMPTS", 5))),
            max_range_days=int(config.get("MAX_AVAILABILITY_RANGE_DAYS", 93)),
            max_report_days=int(config.get("MAX_REPORT_RANGE_DAYS", 366)),
        )

    def base_capacity(self, day: date) -> int:
        return self.capacity_mon_wed if day.weekday() in MON_TO_WED else self.capacity_thu_sun

    def last_bookable_date(self, today: date) -> date:
        return today + timedelta(days=self.booking_window_days)

    def is_gated(self, day: date, today: date) -> bool:
        return day < today or day > self.last_bookable_date(today)

    def slot_start(self, day: date, slot: str) -> datetime:
        hours, minutes = slot.split(":")
        return datetime(day.year, day.month, day.day, int(hours), int(minutes))


def current_policy() -> BookingPolicy:
    from flask import current_app
    return BookingPolicy.from_config(current_app.config)


def local_now() -> datetime:
    # server-local wall clock
    return datetime.now()
