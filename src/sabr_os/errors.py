"""Typed failures raised or reported by the prayer-time and revision engines."""


class SabrError(Exception):
    """Base class for every failure the engines report to their callers."""


class MissingLocation(SabrError):
    """Neither coordinates nor a known city were supplied."""


class UnknownMethod(SabrError, ValueError):
    def __init__(self, name):
        super().__init__(f"Unknown calculation method: {name!r}")
        self.name = name


class NoSolution(SabrError):
    """The sun never reaches the angle a prayer needs on this date.

    Reported per prayer inside a PrayerTimeSet, never raised out of compute().
    """

    def __init__(self, prayer, reason: str = ""):
        message = f"No solution for {prayer.display_name}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.prayer = prayer
        self.reason = reason


class InvalidRating(SabrError, ValueError):
    def __init__(self, rating):
        super().__init__(f"Quality rating must be an integer 1-5, got {rating!r}")
        self.rating = rating


class InvalidRange(SabrError, ValueError):
    """Ayah range does not fit inside its surah."""
