"""
codequest.constants — Shared Constants & Helpers
=================================================

Single source of truth for point bounds, modifier bounds and identifier
formats.  Import from here instead of duplicating in the validator,
calculator, services and API schemas.
"""

from __future__ import annotations

import math
import re

# ---------------------------------------------------------------------------
# Per-activity point bounds
# ---------------------------------------------------------------------------
MIN_POINTS_PER_ACTIVITY = 5
MAX_POINTS_PER_ACTIVITY = 100

# A configured base value may not drop below this share of the system default
DEFAULT_FLOOR_RATIO = 0.5


# ---------------------------------------------------------------------------
# AI-generated code modifier
# ---------------------------------------------------------------------------
MIN_AI_MODIFIER = 0.5
MAX_AI_MODIFIER = 1.0
DEFAULT_AI_MODIFIER = 0.75


# ---------------------------------------------------------------------------
# Leveling
# ---------------------------------------------------------------------------
MIN_LEVEL = 1
MAX_LEVEL = 100


# ---------------------------------------------------------------------------
# Identifier formats
# ---------------------------------------------------------------------------
_UUID_V4_REGEX = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


def is_uuid_v4(value: object) -> bool:
    """True when *value* is a string shaped like a version-4 UUID."""
    return isinstance(value, str) and bool(_UUID_V4_REGEX.match(value))


def is_finite_number(value: object) -> bool:
    """True for real ints/floats that are not NaN or infinite.

    ``bool`` is rejected even though it subclasses ``int``; a JSON ``true``
    is never a point value.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def format_number(value: float) -> str:
    """Render a point value for calculation traces (``25``, ``18.75``).

    Non-integers keep every digit of their repr so a trace shows the exact
    value the calculation used.
    """
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))
