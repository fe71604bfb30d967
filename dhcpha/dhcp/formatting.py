"""Human-readable rendering of HA heartbeat ages."""
import math
from typing import List, Optional, Union

NOT_APPLICABLE = 'N/A'

_UNITS = (
    ('day', 'days'),
    ('hour', 'hours'),
    ('minute', 'minutes'),
    ('second', 'seconds'),
)


def format_age(age: Optional[Union[int, float]]) -> str:
    """
    Render elapsed seconds as e.g. "1 day, 2 hours, 5 seconds ago".

    Days, hours and minutes are floored; the seconds remainder is rounded
    up. Zero components are left out, and an all-zero age reads
    "0 seconds ago". None yields "N/A".
    """
    if age is None:
        return NOT_APPLICABLE
    if age < 0:
        raise ValueError(f"Age must be non-negative, got {age}")

    values = (
        int(age // 86400),
        int((age % 86400) // 3600),
        int((age % 3600) // 60),
        math.ceil(age % 60),
    )

    parts: List[str] = []
    for value, (singular, plural) in zip(values, _UNITS):
        if value:
            parts.append(f"{value} {singular if value == 1 else plural}")

    body = ', '.join(parts) if parts else '0 seconds'
    return f"{body} ago"
