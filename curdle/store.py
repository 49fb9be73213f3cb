"""
In-memory store
Holds every player's daily game in memory. Same public API as the DB-backed
repository, so routes don't care which one they get.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional, Tuple
from uuid import uuid4
from time import time
from threading import RLock

from .types import Code, GameStatus, GuessResult, MAX_GUESSES
from .engine import check_guess, is_winning_guess
from .secret import secret_for
from .schemas import CodeOut, FeedbackOut, GameState, GuessEntryOut, StatsOut

logger = logging.getLogger(__name__)


class StaleGameError(ValueError):
    """Raised when a guess is sent for a game whose day is already over."""


@dataclass
class GuessEntry:
    guess: Code
    result: GuessResult
    timestamp: float


@dataclass
class Game:
    id: str
    player_id: str
    play_date: date
    secret: Code
    guesses_left: int = MAX_GUESSES
    max_guesses: int = MAX_GUESSES
    status: GameStatus = "in_progress"
    history: List[GuessEntry] = field(default_factory=list)
    created_at: float = field(default_factory=time)
    updated_at: float = field(default_factory=time)

    @property
    def game_over(self) -> bool:
        return self.status != "in_progress"

    @property
    def results(self) -> List[GuessResult]:
        return [entry.result for entry in self.history]


@dataclass
class Stats:
    games_started: int = 0
    games_won: int = 0
    games_lost: int = 0

    current_streak: int = 0
    best_streak: int = 0

    total_guesses_in_wins: int = 0
    fastest_win_guesses: Optional[int] = None

    # wins keyed by guesses used
    win_distribution: Dict[int, int] = field(default_factory=dict)


def to_game_state(game: Game) -> GameState:
    return GameState(
        game_id=game.id,
        player_id=game.player_id,
        play_date=game.play_date,
        guesses_left=game.guesses_left,
        status=game.status,
        game_over=game.game_over,
        history=[
            GuessEntryOut(
                guess=CodeOut.from_code(entry.guess),
                feedback=FeedbackOut.from_result(entry.result),
                timestamp=entry.timestamp,
            )
            for entry in game.history
        ],
    )


class GameStore:
    def __init__(self, max_guesses: int = MAX_GUESSES) -> None:
        self._games: Dict[str, Game] = {}
        self._by_player: Dict[Tuple[str, date], str] = {}
        self._lock = RLock()
        self._stats: Dict[str, Stats] = {}
        self.max_guesses = max_guesses

    def start(self, player_id: str, play_date: date) -> GameState:
        """Return the player's game for that day, creating it on first visit."""
        with self._lock:
            existing = self._by_player.get((player_id, play_date))
            if existing is not None:
                return to_game_state(self._games[existing])

            game = Game(
                id=str(uuid4()),
                player_id=player_id,
                play_date=play_date,
                secret=secret_for(play_date),
                guesses_left=self.max_guesses,
                max_guesses=self.max_guesses,
            )
            self._games[game.id] = game
            self._by_player[(player_id, play_date)] = game.id
            self._stats.setdefault(player_id, Stats()).games_started += 1

        logger.info("Started game %s for player %s on %s", game.id, player_id, play_date)
        return to_game_state(game)

    def get(self, game_id: str) -> Optional[GameState]:
        with self._lock:
            game = self._games.get(game_id)
            return to_game_state(game) if game else None

    def guess(
        self, game_id: str, attempt: Code, today: Optional[date] = None
    ) -> Optional[Tuple[GameState, bool]]:
        """
        Score and record a guess. Returns (state, recorded); recorded is False when
        the game was already over and the guess was ignored.
        """
        with self._lock:
            game = self._games.get(game_id)
            if game is None:
                return None

            if game.game_over:
                # Finished games ignore extra guesses
                return to_game_state(game), False

            if today is not None and game.play_date != today:
                raise StaleGameError(f"This game was for {game.play_date.isoformat()}; start today's game instead.")

            result = check_guess(game.secret, attempt)
            game.history.append(GuessEntry(guess=attempt, result=result, timestamp=time()))
            game.guesses_left -= 1

            if is_winning_guess(result):
                game.status = "won"
            elif game.guesses_left <= 0:
                game.status = "lost"

            game.updated_at = time()

            if game.game_over:
                self._update_stats_on_end(game)

            return to_game_state(game), True

    def results(self, game_id: str) -> List[GuessResult]:
        with self._lock:
            game = self._games.get(game_id)
            return game.results if game else []

    def get_secret(self, game_id: str) -> Optional[Code]:
        """Return the secret code ONLY for finished games; else None."""
        with self._lock:
            game = self._games.get(game_id)
            if game is None or not game.game_over:
                return None
            return game.secret

    # Runs once per game, on the move out of "in_progress"
    def _update_stats_on_end(self, game: Game) -> None:
        stats = self._stats.setdefault(game.player_id, Stats())
        if game.status == "won":
            stats.games_won += 1

            stats.current_streak += 1
            if stats.current_streak > stats.best_streak:
                stats.best_streak = stats.current_streak

            guesses_used = len(game.history)
            stats.total_guesses_in_wins += guesses_used
            if stats.fastest_win_guesses is None or guesses_used < stats.fastest_win_guesses:
                stats.fastest_win_guesses = guesses_used
            stats.win_distribution[guesses_used] = stats.win_distribution.get(guesses_used, 0) + 1
        else:
            stats.games_lost += 1
            stats.current_streak = 0

        logger.info("Game %s finished: %s in %d guess(es)", game.id, game.status, len(game.history))

    def get_stats(self, player_id: str) -> StatsOut:
        with self._lock:
            stats = self._stats.get(player_id) or Stats()
            avg = (stats.total_guesses_in_wins / stats.games_won) if stats.games_won > 0 else None
            return StatsOut(
                player_id=player_id,
                games_started=stats.games_started,
                games_won=stats.games_won,
                games_lost=stats.games_lost,
                current_streak=stats.current_streak,
                best_streak=stats.best_streak,
                average_guesses_to_win=avg,
                fastest_win_guesses=stats.fastest_win_guesses,
                win_distribution={n: stats.win_distribution.get(n, 0) for n in range(1, self.max_guesses + 1)},
            )

    def reset_stats(self, player_id: str) -> None:
        with self._lock:
            self._stats[player_id] = Stats()
        logger.info("Scoreboard reset for player %s", player_id)
