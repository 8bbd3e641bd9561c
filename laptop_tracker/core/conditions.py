"""Laptop condition constants and helpers."""

CONDITION_NEW = "New"
CONDITION_USED = "Used"

# Display order for condition breakdowns.
CONDITION_CHOICES = (
    CONDITION_NEW,
    CONDITION_USED,
)


def normalize_condition(value: object) -> str | None:
    """Return the canonical spelling of a condition, or ``None`` when unknown."""

    raw = getattr(value, "value", value)
    if not isinstance(raw, str):
        return None
    folded = raw.strip().casefold()
    for choice in CONDITION_CHOICES:
        if choice.casefold() == folded:
            return choice
    return None


__all__ = [
    "CONDITION_CHOICES",
    "CONDITION_NEW",
    "CONDITION_USED",
    "normalize_condition",
]
