from ...shared.errors import ValidationError

AVAILABILITY_AVAILABLE = "available"
AVAILABILITY_UNAVAILABLE = "unavailable"
AVAILABILITY_MAYBE = "maybe"

AVAILABILITY_VALUES = (AVAILABILITY_AVAILABLE, AVAILABILITY_UNAVAILABLE, AVAILABILITY_MAYBE)


def parse_availability(value: str) -> str:
    if value not in AVAILABILITY_VALUES:
        raise ValidationError(
            f"invalid availability: must be 'available', 'unavailable' or 'maybe', got: {value}"
        )
    return value
