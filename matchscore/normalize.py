import math


def normalize_text(s: str) -> str:
    return " ".join(s.strip().lower().split())


def normalize_skill(skill: str) -> str:
    return normalize_text(skill)


def normalize_skills(skills) -> list[str]:
    return [normalize_skill(s) for s in skills or () if isinstance(s, str) and s.strip()]


def substring_match(a: str, b: str) -> bool:
    """True when either string contains the other (both already normalized)."""
    return a in b or b in a


def round_half_up(value: float) -> int:
    # round() is banker's rounding; scores round .5 upward
    return int(math.floor(value + 0.5))


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def clamp_score(value: float) -> int:
    return int(clamp(round_half_up(value), 0, 100))
