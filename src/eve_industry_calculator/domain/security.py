from __future__ import annotations

import math

from eve_industry_calculator.domain.industry import SecurityClass


# Thresholds apply to the one-decimal rating the client shows, not the true value.
HIGH_SEC_THRESHOLD = 0.5
LOW_SEC_MINIMUM = 0.1


def _round_half_away_from_zero(value: float) -> float:
    return math.copysign(math.floor(abs(value) + 0.5), value)


def display_security(true_security: float) -> float:
    """Return the one-decimal security rating the game client shows.

    Systems with a true security in (0.0, 0.05) display as 0.1 rather than 0.0.
    """

    if 0.0 < true_security < 0.05:
        return 0.1
    # +0.0 normalizes a negative zero from small negative values.
    return _round_half_away_from_zero(true_security * 10.0) / 10.0 + 0.0


def classify_security(true_security: float) -> SecurityClass:
    """High-sec is 0.5-1.0, low-sec 0.1-0.4, anything shown as 0.0 or below is null-sec/wormhole."""

    shown = display_security(true_security)
    if shown >= HIGH_SEC_THRESHOLD:
        return SecurityClass.HIGH_SEC
    if shown >= LOW_SEC_MINIMUM:
        return SecurityClass.LOW_SEC
    return SecurityClass.NULL_SEC_OR_WORMHOLE
