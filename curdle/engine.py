"""
Pure game logic (no HTTP, no storage).

Two jobs:
- generate_daily_code: derive the day's secret from the calendar date
- check_guess: color every digit of a guess green / yellow / black

Numeric fields are compared digit by digit after zero padding
(milkfat -> 3 digits, day -> 2 digits, year -> 4 digits).
The month is compared as a whole: exact is green, a neighbouring month is yellow.
"""

import math
from datetime import date
from typing import List, Sequence

from .types import (
    Code,
    DAY_WIDTH,
    Feedback,
    FeedbackColor,
    FIRST_YEAR,
    GuessResult,
    MAX_GUESSES,
    MILKFAT_WIDTH,
    Month,
    MONTHS,
    YEAR_WIDTH,
)


def daily_fraction(day: date) -> float:
    """
    One pseudo-random number in [0, 1) for the given date.

    The date's digits (2024-03-09 -> 20240309) feed a sine hash.
    Not random in any serious sense, but stable for the whole day.
    """
    seed = int(day.isoformat().replace("-", ""))
    x = math.sin(seed) * 10000
    return x - math.floor(x)


def generate_daily_code(day: date) -> Code:
    """
    Example:
      generate_daily_code(date(2024, 3, 9)) returns the same Code every time it is called.

    All four fields are drawn from the SAME fraction, so they move together.
    Keep it that way: changing the mapping changes every past and future answer.
    """
    fraction = daily_fraction(day)

    milkfat = math.floor(fraction * 101)                 # 0 -> 100
    month = MONTHS[math.floor(fraction * 12)]            # January -> December
    day_of_month = math.floor(fraction * 28) + 1         # 1 -> 28, every month has these
    year_span = day.year - FIRST_YEAR + 1
    year = math.floor(fraction * year_span) + FIRST_YEAR  # 1886 -> this year

    return Code(milkfat=milkfat, month=month, day=day_of_month, year=year)


def pad_digits(value: int, width: int) -> str:
    """0 -> '000', 7 -> '007', 100 -> '100' for width 3."""
    return str(value).zfill(width)


def compare_digits(target: int, guess: int, width: int) -> Feedback:
    """
    Example:
      target = 112, guess = 211 (width 3)
      -> ['yellow', 'green', 'yellow']

    A digit is only ever matched once: the count of green + yellow for a digit
    never goes above how many times it appears in the target.
    """
    target_digits = list(pad_digits(target, width))
    guess_digits = list(pad_digits(guess, width))
    result: List[FeedbackColor] = ["black"] * width

    # 1. Exact matches. Consume the target digit so the second pass skips it.
    i = 0
    while i < width:
        if guess_digits[i] == target_digits[i]:
            result[i] = "green"
            target_digits[i] = "-"
        i += 1

    # 2. Misplaced digits, left to right, each target digit used at most once
    i = 0
    while i < width:
        if result[i] != "green":
            digit = guess_digits[i]
            if digit in target_digits:
                result[i] = "yellow"
                target_digits[target_digits.index(digit)] = "-"
        i += 1

    return result


def compare_months(target: Month, guess: Month) -> FeedbackColor:
    """Exact month is green; the month right before or after (December wraps to January) is yellow."""
    target_index = MONTHS.index(target)
    guess_index = MONTHS.index(guess)

    if target_index == guess_index:
        return "green"

    diff = abs(target_index - guess_index)
    if diff == 1 or diff == 11:
        return "yellow"

    return "black"


def check_guess(secret: Code, guess: Code) -> GuessResult:
    return GuessResult(
        milkfat_feedback=compare_digits(secret.milkfat, guess.milkfat, MILKFAT_WIDTH),
        month_feedback=compare_months(secret.month, guess.month),
        day_feedback=compare_digits(secret.day, guess.day, DAY_WIDTH),
        year_feedback=compare_digits(secret.year, guess.year, YEAR_WIDTH),
    )


def is_winning_guess(result: GuessResult) -> bool:
    """
    Win = every digit box is green and the month is green.
    """
    digits = result.milkfat_feedback + result.day_feedback + result.year_feedback
    for color in digits:
        if color != "green":
            return False
    return result.month_feedback == "green"


def is_game_over(results: Sequence[GuessResult], max_guesses: int = MAX_GUESSES) -> bool:
    """The game ends on the first win, or once every guess has been used."""
    if results and is_winning_guess(results[-1]):
        return True
    return len(results) >= max_guesses


# Share grid: what players paste into the group chat after the game
SQUARES = {"green": "\U0001F7E9", "yellow": "\U0001F7E8", "black": "⬛"}


def share_grid(play_date: date, results: Sequence[GuessResult], max_guesses: int = MAX_GUESSES) -> str:
    """
    Example (won on the second guess):
      Curdle 2024-03-09 2/6
      🟩⬛🟨 🟨 ⬛⬛ 🟩🟩⬛⬛
      🟩🟩🟩 🟩 🟩🟩 🟩🟩🟩🟩
    """
    won = bool(results) and is_winning_guess(results[-1])
    score = str(len(results)) if won else "X"
    lines = [f"Curdle {play_date.isoformat()} {score}/{max_guesses}"]

    for result in results:
        cells = [
            "".join(SQUARES[c] for c in result.milkfat_feedback),
            SQUARES[result.month_feedback],
            "".join(SQUARES[c] for c in result.day_feedback),
            "".join(SQUARES[c] for c in result.year_feedback),
        ]
        lines.append(" ".join(cells))

    return "\n".join(lines)
