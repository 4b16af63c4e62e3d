"""SM-2 spaced repetition algorithm, on the 1-5 recall scale used for hifz revision."""
import math

from sabr_os.errors import InvalidRating

MIN_EASE = 1.3
PASSING_QUALITY = 3
FIRST_INTERVAL = 1
SECOND_INTERVAL = 6


def validate_quality(quality) -> int:
    """Return ``quality`` if it is an int in 1..5, else raise InvalidRating."""
    if isinstance(quality, bool) or not isinstance(quality, int) or not 1 <= quality <= 5:
        raise InvalidRating(quality)
    return quality


def next_ease(ease_factor: float, quality: int) -> float:
    new_ef = ease_factor + (0.1 - (5 - quality) * (0.08 + (5 - quality) * 0.02))
    return round(max(MIN_EASE, new_ef), 2)


def sm2_update(
    quality: int,
    repetitions: int,
    ease_factor: float,
    interval: int,
) -> dict:
    """Calculate next review parameters using SM-2.

    Args:
        quality: Rating 1-5 (1=forgot entirely, 5=perfect recall)
        repetitions: Number of consecutive successful revisions
        ease_factor: Current ease factor (minimum 1.3)
        interval: Current interval in days

    Returns:
        Dict with updated interval, repetitions, ease_factor.
    """
    validate_quality(quality)
    new_ef = next_ease(ease_factor, quality)

    if quality >= PASSING_QUALITY:
        if repetitions == 0:
            new_interval = FIRST_INTERVAL
        elif repetitions == 1:
            new_interval = SECOND_INTERVAL
        else:
            # round() first so float noise such as 13.000000000000002 stays 13
            new_interval = math.ceil(round(max(interval, 1) * new_ef, 6))
        new_repetitions = repetitions + 1
    else:
        # Forgetting a memorized range is a full regression, not a decay
        new_repetitions = 0
        new_interval = 1

    return {
        "interval": new_interval,
        "repetitions": new_repetitions,
        "ease_factor": new_ef,
    }
