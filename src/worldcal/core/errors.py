class CalendarError(Exception):
    """Base error."""

class DateOutOfRange(CalendarError, ValueError):
    """Raised when a month, day, intercalary day or time component does not exist in the calendar."""

class UnknownVariant(CalendarError, KeyError):
    """Raised when a requested variant key is not declared by the base calendar."""

class InvalidLeapRule(CalendarError, ValueError):
    """Raised for an unknown leap rule or a custom rule with interval < 1."""

class UnknownCalendar(CalendarError, KeyError):
    """Raised when a calendar id is not registered."""
