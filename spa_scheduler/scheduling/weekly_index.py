from datetime import date

from spa_scheduler.core.enums import DAYS_FROM_SUNDAY, DayOfWeek


def day_of_week_for(target_date: date) -> DayOfWeek:
    # isoweekday: Monday=1 ... Sunday=7, so modulo 7 gives Sunday=0.
    return DAYS_FROM_SUNDAY[target_date.isoweekday() % 7]


def windows_for_date(windows, target_date: date) -> list:
    """Return the active windows that recur on ``target_date``'s weekday.

    ``windows`` are one staff member's availability rows (anything with
    ``day_of_week`` and ``is_active``). Input order is kept. A staff member who
    does not work that day simply gets an empty list.
    """
    day_of_week = day_of_week_for(target_date)
    return [
        window
        for window in windows
        if DayOfWeek(window.day_of_week) == day_of_week and window.is_active
    ]
