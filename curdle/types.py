"""
Labels for clarity, plus the two small value objects the engine trades in.
"""

from dataclasses import dataclass
from typing import List, Literal

Month = Literal[
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]
FeedbackColor = Literal["green", "yellow", "black"]
Feedback = List[FeedbackColor]  # one color per digit
GameStatus = Literal["in_progress", "won", "lost"]

MONTHS: List[Month] = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]

# Digit widths used when comparing numeric fields
MILKFAT_WIDTH = 3
DAY_WIDTH = 2
YEAR_WIDTH = 4

FIRST_YEAR = 1886
MAX_GUESSES = 6


@dataclass(frozen=True)
class Code:
    """Milkfat percentage plus an expiration date. Used for secrets and guesses alike."""
    milkfat: int
    month: Month
    day: int
    year: int


SecretCode = Code
Guess = Code


@dataclass(frozen=True)
class GuessResult:
    milkfat_feedback: Feedback
    month_feedback: FeedbackColor
    day_feedback: Feedback
    year_feedback: Feedback
