"""
SQLAlchemy ORM models.

Tables:
- games: one row per (player, day). The secret is NOT stored; it is re-derived from play_date.
- guesses: one row per guess (history), with its feedback colors as JSON
- stats: one scoreboard row per player
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from sqlalchemy import (
    String, Integer, Date, DateTime, Enum, ForeignKey, JSON, UniqueConstraint,
)
from sqlalchemy.orm import relationship, Mapped, mapped_column
from .db import Base
from .types import GameStatus, Month, MONTHS


class Game(Base):
    __tablename__ = "games"
    __table_args__ = (UniqueConstraint("player_id", "play_date", name="uq_games_player_day"),)

    # UUIDs generated in code; stored as strings
    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    player_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    play_date: Mapped[date] = mapped_column(Date, nullable=False)

    guesses_left: Mapped[int] = mapped_column(Integer, nullable=False, default=6)
    max_guesses: Mapped[int] = mapped_column(Integer, nullable=False, default=6)

    status: Mapped[GameStatus] = mapped_column(
        Enum("in_progress", "won", "lost", name="game_status"),
        nullable=False,
        default="in_progress",
    )

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)

    guesses: Mapped[list["Guess"]] = relationship(
        back_populates="game",
        cascade="all, delete-orphan",
        order_by="Guess.id.asc()",
    )


class Guess(Base):
    __tablename__ = "guesses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    game_id: Mapped[str] = mapped_column(String(36), ForeignKey("games.id", ondelete="CASCADE"), index=True)
    game: Mapped[Game] = relationship(back_populates="guesses")

    # The player's guess
    milkfat: Mapped[int] = mapped_column(Integer, nullable=False)
    month: Mapped[Month] = mapped_column(Enum(*MONTHS, name="month"), nullable=False)
    day: Mapped[int] = mapped_column(Integer, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)

    # Engine output: {"milkfat": [...], "month": "green", "day": [...], "year": [...]}
    feedback: Mapped[dict] = mapped_column(JSON, nullable=False)

    timestamp: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)


# Scoreboard: one row per player
class Stats(Base):
    __tablename__ = "stats"

    player_id: Mapped[str] = mapped_column(String(64), primary_key=True)

    games_started: Mapped[int] = mapped_column(Integer, default=0)
    games_won: Mapped[int] = mapped_column(Integer, default=0)
    games_lost: Mapped[int] = mapped_column(Integer, default=0)

    current_streak: Mapped[int] = mapped_column(Integer, default=0)
    best_streak: Mapped[int] = mapped_column(Integer, default=0)

    total_guesses_in_wins: Mapped[int] = mapped_column(Integer, default=0)
    fastest_win_guesses: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    # wins by number of guesses used: index 0 -> won on guess 1
    win_distribution: Mapped[list[int]] = mapped_column(JSON, nullable=False, default=list)
