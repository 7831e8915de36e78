"""
core/strength.py -- Advisory password strength score.

Four independent criteria worth 25 points each, no partial credit. The score
is a pure function of the password: no history, no hidden state. It never
blocks submission; the sign-up length rule in core/validation.py does that.
"""

from __future__ import annotations

import re

from core.models import StrengthLabel, StrengthScore

_POINTS = 25

# (predicate, hint shown while the criterion is unmet)
_CRITERIA = (
    (lambda p: len(p) >= 8, "at least 8 characters"),
    (lambda p: re.search(r"[A-Z]", p) is not None, "an uppercase letter"),
    (lambda p: re.search(r"[0-9]", p) is not None, "a number"),
    (lambda p: re.search(r"[^A-Za-z0-9]", p) is not None, "a special character"),
)


def label_for(value: int) -> StrengthLabel:
    """Map a 0-100 score to its bucket: Weak <=25, Fair <=50, Good <=75, else Strong."""
    if value <= 25:
        return StrengthLabel.weak
    if value <= 50:
        return StrengthLabel.fair
    if value <= 75:
        return StrengthLabel.good
    return StrengthLabel.strong


def score(password: str) -> StrengthScore:
    """Score a password from 0 to 100 and label it.

    >>> score("Abcdefg1").value
    75
    """
    unmet: list[str] = []
    value = 0
    for check, hint in _CRITERIA:
        if check(password):
            value += _POINTS
        else:
            unmet.append(hint)
    return StrengthScore(value=value, label=label_for(value), unmet=tuple(unmet))
