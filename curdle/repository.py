"""
DB-backed repository that mirrors the in-memory GameStore API.

Public methods:
- start(player_id, play_date) -> GameState
- get(game_id) -> GameState | None
- guess(game_id, attempt, today) -> (GameState, recorded) | None
- results(game_id) -> list[GuessResult]
- get_secret(game_id) -> Code | None
- get_stats(player_id) -> StatsOut
- reset_stats(player_id) -> None

The secret is never written to the database: it is re-derived from the game's
play_date whenever a guess has to be scored.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional
from uuid import uuid4

from sqlalchemy.orm import Session
from sqlalchemy import select

from .models import Game as GameORM, Guess as GuessORM, Stats as StatsORM
from .types import Code, GuessResult, MAX_GUESSES
from .engine import check_guess, is_winning_guess
from .secret import secret_for
from .store import StaleGameError
from .schemas import (
    CodeOut, FeedbackOut, GuessEntryOut, GameState, StatsOut,
)

logger = logging.getLogger(__name__)

# --- DTO builders: DB rows -> API responses ---


def _feedback_json(result: GuessResult) -> dict:
    return FeedbackOut.from_result(result).model_dump()


def _to_guess_out(g: GuessORM) -> GuessEntryOut:
    return GuessEntryOut(
        guess=CodeOut(milkfat=g.milkfat, month=g.month, day=g.day, year=g.year),
        feedback=FeedbackOut(**g.feedback),
        timestamp=g.timestamp.timestamp(),
    )


def _to_game_state(game: GameORM, history: list[GuessORM]) -> GameState:
    return GameState(
        game_id=game.id,
        player_id=game.player_id,
        play_date=game.play_date,
        guesses_left=game.guesses_left,
        status=game.status,
        game_over=game.status != "in_progress",
        history=[_to_guess_out(h) for h in history],
    )


class DBGameStore:
    """Drop-in replacement for the in-memory GameStore, backed by SQLAlchemy."""

    def __init__(self, db: Session, max_guesses: int = MAX_GUESSES):
        self.db = db
        self.max_guesses = max_guesses

    # --- helpers ---

    def _history(self, game_id: str) -> list[GuessORM]:
        return (
            self.db.execute(select(GuessORM).where(GuessORM.game_id == game_id).order_by(GuessORM.id.asc()))
            .scalars()
            .all()
        )

    def _get_or_create_stats(self, player_id: str) -> StatsORM:
        stats = self.db.get(StatsORM, player_id)
        if not stats:
            stats = StatsORM(player_id=player_id, win_distribution=[0] * self.max_guesses)
            self.db.add(stats)
            self.db.commit()
            self.db.refresh(stats)
        return stats

    # --- Public API ---

    def start(self, player_id: str, play_date: date) -> GameState:
        existing = self.db.execute(
            select(GameORM).where(GameORM.player_id == player_id, GameORM.play_date == play_date)
        ).scalar_one_or_none()
        if existing:
            return _to_game_state(existing, self._history(existing.id))

        now = datetime.utcnow()
        game = GameORM(
            id=str(uuid4()),
            player_id=player_id,
            play_date=play_date,
            guesses_left=self.max_guesses,
            max_guesses=self.max_guesses,
            status="in_progress",
            created_at=now,
            updated_at=now,
        )
        self.db.add(game)

        stats = self._get_or_create_stats(player_id)
        stats.games_started += 1

        self.db.commit()
        self.db.refresh(game)

        logger.info("Started game %s for player %s on %s", game.id, player_id, play_date)
        return _to_game_state(game, history=[])

    def get(self, game_id: str) -> Optional[GameState]:
        game = self.db.get(GameORM, game_id)
        if not game:
            return None
        return _to_game_state(game, self._history(game_id))

    def guess(
        self, game_id: str, attempt: Code, today: Optional[date] = None
    ) -> Optional[tuple[GameState, bool]]:
        game = self.db.get(GameORM, game_id)
        if not game:
            return None

        if game.status != "in_progress":
            # Return current state without modifying
            return _to_game_state(game, self._history(game_id)), False

        if today is not None and game.play_date != today:
            raise StaleGameError(f"This game was for {game.play_date.isoformat()}; start today's game instead.")

        result = check_guess(secret_for(game.play_date), attempt)

        self.db.add(GuessORM(
            game_id=game.id,
            milkfat=attempt.milkfat,
            month=attempt.month,
            day=attempt.day,
            year=attempt.year,
            feedback=_feedback_json(result),
            timestamp=datetime.utcnow(),
        ))

        game.guesses_left -= 1
        if is_winning_guess(result):
            game.status = "won"
        elif game.guesses_left <= 0:
            game.status = "lost"

        game.updated_at = datetime.utcnow()

        # Terminal transition happens at most once per game
        if game.status in ("won", "lost"):
            self._update_stats_on_end(game, guesses_used=game.max_guesses - game.guesses_left)

        self.db.commit()

        return _to_game_state(game, self._history(game_id)), True

    def results(self, game_id: str) -> list[GuessResult]:
        return [FeedbackOut(**g.feedback).to_result() for g in self._history(game_id)]

    def _update_stats_on_end(self, game: GameORM, guesses_used: int) -> None:
        stats = self._get_or_create_stats(game.player_id)
        if game.status == "won":
            stats.games_won += 1

            stats.current_streak += 1
            if stats.current_streak > stats.best_streak:
                stats.best_streak = stats.current_streak

            stats.total_guesses_in_wins += guesses_used
            if stats.fastest_win_guesses is None or guesses_used < stats.fastest_win_guesses:
                stats.fastest_win_guesses = guesses_used

            # JSON columns only notice reassignment, not in-place edits
            distribution = list(stats.win_distribution or [])
            while len(distribution) < guesses_used:
                distribution.append(0)
            distribution[guesses_used - 1] += 1
            stats.win_distribution = distribution
        else:
            stats.games_lost += 1
            stats.current_streak = 0

        logger.info("Game %s finished: %s in %d guess(es)", game.id, game.status, guesses_used)

    def get_stats(self, player_id: str) -> StatsOut:
        stats = self._get_or_create_stats(player_id)
        avg = (stats.total_guesses_in_wins / stats.games_won) if stats.games_won > 0 else None
        distribution = list(stats.win_distribution or [])
        return StatsOut(
            player_id=player_id,
            games_started=stats.games_started,
            games_won=stats.games_won,
            games_lost=stats.games_lost,
            current_streak=stats.current_streak,
            best_streak=stats.best_streak,
            average_guesses_to_win=avg,
            fastest_win_guesses=stats.fastest_win_guesses,
            win_distribution={
                n: (distribution[n - 1] if n <= len(distribution) else 0)
                for n in range(1, self.max_guesses + 1)
            },
        )

    def reset_stats(self, player_id: str) -> None:
        stats = self._get_or_create_stats(player_id)
        stats.games_started = 0
        stats.games_won = 0
        stats.games_lost = 0
        stats.current_streak = 0
        stats.best_streak = 0
        stats.total_guesses_in_wins = 0
        stats.fastest_win_guesses = None
        stats.win_distribution = [0] * self.max_guesses
        self.db.commit()
        logger.info("Scoreboard reset for player %s", player_id)

    def get_secret(self, game_id: str) -> Optional[Code]:
        """Return the secret code ONLY for finished games; else None."""
        game = self.db.get(GameORM, game_id)
        if not game:
            return None
        if game.status in ("won", "lost"):
            return secret_for(game.play_date)
        return None
