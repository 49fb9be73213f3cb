"""
Explicit validation & Pydantic models
- Requests are validated here, so a malformed guess never reaches the engine.
- Responses describe feedback, game state and the scoreboard.
"""

from datetime import date
from typing import Dict, List, Literal, Optional
from pydantic import BaseModel, Field

from .types import Code, FIRST_YEAR, GuessResult, Month

Color = Literal["green", "yellow", "black"]
Status = Literal["in_progress", "won", "lost"]


# 1. Validates the player's guess
class GuessRequest(BaseModel):
    milkfat: int = Field(..., ge=0, le=100, description="Milkfat percentage, 0 to 100")
    month: Month = Field(..., description="Expiration month, e.g. 'March'")
    day: int = Field(..., ge=1, le=31, description="Expiration day of month")
    # Upper bound (this year) is checked by the route, against the same "today" it plays
    year: int = Field(..., ge=FIRST_YEAR, description=f"Expiration year, {FIRST_YEAR} to this year")

    def to_code(self) -> Code:
        return Code(milkfat=self.milkfat, month=self.month, day=self.day, year=self.year)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"milkfat": 2, "month": "March", "day": 14, "year": 1999},
                {"milkfat": 100, "month": "December", "day": 1, "year": 1886},
            ]
        }
    }


class StartGameRequest(BaseModel):
    player_id: Optional[str] = Field(
        None, max_length=64, description="Stable id kept by the client; omit to get a new one"
    )


# 2. Code shape used when the secret is revealed
class CodeOut(BaseModel):
    milkfat: int
    month: Month
    day: int
    year: int

    @classmethod
    def from_code(cls, code: Code) -> "CodeOut":
        return cls(milkfat=code.milkfat, month=code.month, day=code.day, year=code.year)


# 3. Feedback colors for one guess
class FeedbackOut(BaseModel):
    milkfat: List[Color] = Field(..., description="3 colors, one per digit")
    month: Color = Field(..., description="Single color for the month")
    day: List[Color] = Field(..., description="2 colors, one per digit")
    year: List[Color] = Field(..., description="4 colors, one per digit")

    @classmethod
    def from_result(cls, result: GuessResult) -> "FeedbackOut":
        return cls(
            milkfat=result.milkfat_feedback,
            month=result.month_feedback,
            day=result.day_feedback,
            year=result.year_feedback,
        )

    def to_result(self) -> GuessResult:
        return GuessResult(
            milkfat_feedback=list(self.milkfat),
            month_feedback=self.month,
            day_feedback=list(self.day),
            year_feedback=list(self.year),
        )


# 4. A guess as it sits in the history
class GuessEntryOut(BaseModel):
    guess: CodeOut = Field(..., description="The player's guess")
    feedback: FeedbackOut = Field(..., description="Colors for every box")
    timestamp: float = Field(..., description="When the guess was made")


# 5. Represents the overall state of a day's game
class GameState(BaseModel):
    game_id: str = Field(..., description="Unique ID for the game")
    player_id: str = Field(..., description="Who is playing")
    play_date: date = Field(..., description="The day this game's secret belongs to")
    guesses_left: int = Field(..., description="How many guesses remain")
    status: Status = Field(..., description="Current state of the game")
    game_over: bool = Field(..., description="True once the game is won or lost")
    history: List[GuessEntryOut] = Field(..., description="All guesses made so far with feedback")


# 6. Result of a guess (or end of the game)
class GuessResponse(BaseModel):
    guesses_left: int = Field(..., description="How many guesses remain")
    status: Status = Field(..., description="Current state of the game")
    game_over: bool = Field(..., description="True once the game is won or lost")
    feedback: Optional[FeedbackOut] = Field(None, description="Feedback from the latest guess")
    secret: Optional[CodeOut] = Field(None, description="The secret code (only revealed if game is over)")
    share: Optional[str] = Field(None, description="Emoji grid to share (only once the game is over)")
    note: Optional[str] = Field(None, description="Extra note (ex. 'Game lost. No more guesses.')")


# 7. Today's puzzle metadata, never the answer
class DailyOut(BaseModel):
    play_date: date
    max_guesses: int
    months: List[Month]
    milkfat_range: List[int] = Field(..., description="[min, max] inclusive")
    day_range: List[int] = Field(..., description="[min, max] inclusive")
    year_range: List[int] = Field(..., description="[min, max] inclusive")


# 8. Scoreboard
class StatsOut(BaseModel):
    player_id: str = Field(..., description="Whose scoreboard this is")
    games_started: int = Field(..., description="Total games started")
    games_won: int = Field(..., description="Total games won")
    games_lost: int = Field(..., description="Total games lost")

    current_streak: int = Field(..., description="Current consecutive wins")
    best_streak: int = Field(..., description="Best consecutive wins")

    average_guesses_to_win: Optional[float] = Field(
        None, description="Average number of guesses used in wins"
    )
    fastest_win_guesses: Optional[int] = Field(
        None, description="Fewest guesses taken to win a game"
    )
    win_distribution: Dict[int, int] = Field(
        ..., description="Number of wins keyed by guesses used (1..max guesses)"
    )
