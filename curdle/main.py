'''
Curdle API

Guess the milkfat percentage and expiration date of today's carton.

Endpoints:
GET  /daily                -> today's puzzle rules (never the answer)
POST /games                -> start (or resume) today's game for a player
GET  /games/{id}           -> read state & history
POST /games/{id}/guess     -> submit a guess

Extras:
GET  /stats?player_id=     -> that player's scoreboard
POST /stats/reset?player_id= -> reset it

CURDLE_STORE=memory keeps everything in process; the default is the SQL database.
'''

import logging
from typing import Optional, Union
from uuid import uuid4

from fastapi import FastAPI, HTTPException, Depends
from fastapi.middleware.cors import CORSMiddleware

from .config import Config, configure_logging
from .secret import today_utc
from .engine import share_grid
from .db import get_db                  # SQLAlchemy Session dependency
from .repository import DBGameStore     # DB-backed store
from .store import GameStore, StaleGameError
from .bootstrap_db import create_all    # dev-only: create tables
from .types import FIRST_YEAR, MONTHS

from .schemas import (
    CodeOut,
    DailyOut,
    GameState,
    GuessRequest,
    GuessResponse,
    StartGameRequest,
    StatsOut,
)

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Curdle API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=Config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"]
)

# --- Dev convenience: auto-create tables locally ---
if Config.APP_ENV == "local":
    @app.on_event("startup")
    def _dev_create_tables():
        create_all()

Store = Union[DBGameStore, GameStore]

_memory_store = GameStore(max_guesses=Config.MAX_GUESSES)


def get_db_store(session=Depends(get_db)) -> DBGameStore:
    return DBGameStore(session, max_guesses=Config.MAX_GUESSES)


def get_memory_store() -> GameStore:
    return _memory_store


# Routes depend on get_store; the backend is picked once at import time
get_store = get_memory_store if Config.STORE == "memory" else get_db_store

# ---------------- Routes ----------------


@app.get("/daily", response_model=DailyOut, summary="Today's puzzle rules")
def get_daily() -> DailyOut:
    today = today_utc()
    return DailyOut(
        play_date=today,
        max_guesses=Config.MAX_GUESSES,
        months=MONTHS,
        milkfat_range=[0, 100],
        day_range=[1, 31],
        year_range=[FIRST_YEAR, today.year],
    )


@app.post("/games", response_model=GameState, summary="Start or resume today's game")
def start_game(
    payload: Optional[StartGameRequest] = None,
    store: Store = Depends(get_store),
) -> GameState:
    """
    Each player gets one game per day. Calling this again the same day
    returns the same game (with its history), so a reload picks up where it left off.
    """
    player_id = (payload.player_id if payload else None) or str(uuid4())
    return store.start(player_id, today_utc())


@app.get("/games/{game_id}", response_model=GameState, summary="Get current game state")
def get_game(
    game_id: str,
    store: Store = Depends(get_store),
) -> GameState:
    game_state = store.get(game_id)
    if not game_state:
        raise HTTPException(status_code=404, detail="Game not found")
    return game_state


@app.post("/games/{game_id}/guess", response_model=GuessResponse, summary="Submit a guess")
def submit_guess(
    game_id: str,
    payload: GuessRequest,
    store: Store = Depends(get_store),
) -> GuessResponse:
    today = today_utc()
    if payload.year > today.year:
        raise HTTPException(
            status_code=422,
            detail=f"Year must be between {FIRST_YEAR} and {today.year}.",
        )

    try:
        outcome = store.guess(game_id, payload.to_code(), today=today)
    except StaleGameError as err:
        logger.info("Rejected guess for stale game %s", game_id)
        raise HTTPException(status_code=409, detail=str(err))
    if outcome is None:
        raise HTTPException(status_code=404, detail="Game not found")

    updated, recorded = outcome

    # A finished game ignores the guess, so there is no new feedback to echo
    feedback = updated.history[-1].feedback if recorded else None

    secret = None
    share = None
    note = None
    if updated.game_over:
        code = store.get_secret(game_id)
        secret = CodeOut.from_code(code) if code else None
        share = share_grid(updated.play_date, store.results(game_id), Config.MAX_GUESSES)
        note = f"Game {updated.status}. No more guesses allowed."

    return GuessResponse(
        guesses_left=updated.guesses_left,
        status=updated.status,
        game_over=updated.game_over,
        feedback=feedback,
        secret=secret,
        share=share,
        note=note,
    )


@app.get("/stats", response_model=StatsOut, summary="Get a player's scoreboard")
def get_stats(player_id: str, store: Store = Depends(get_store)) -> StatsOut:
    return store.get_stats(player_id)


@app.post("/stats/reset", summary="Reset a player's scoreboard")
def reset_stats(player_id: str, store: Store = Depends(get_store)) -> dict:
    store.reset_stats(player_id)
    return {"message": "Stats reset."}
