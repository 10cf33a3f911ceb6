"""
Severity Scoring - maps a complaint's priority label to a numeric score.

Priority is chosen by the reporter; the score is derived and never edited.
"""

from typing import Optional

SEVERITY_SCORES = {
    "High": 50,
    "Medium": 30,
    "Low": 10,
}

DEFAULT_SEVERITY_SCORE = 10


def severity_score(priority: Optional[str]) -> int:
    """
    Return the severity score for a priority label.

    High → 50, Medium → 30, Low or any unknown/unset value → 10.
    """
    label = getattr(priority, "value", priority)  # Priority enum or plain string
    return SEVERITY_SCORES.get(label, DEFAULT_SEVERITY_SCORE)
