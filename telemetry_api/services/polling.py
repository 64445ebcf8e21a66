import random


def suggest_interval(low: int, high: int) -> int:
    """Seconds a device should sleep before its next report, uniform over [low, high]."""
    return random.randint(low, high)
