"""
RaceSelect: FastAPI Backend

Exposes the scoring engine over HTTP so the web frontend can score the
schedule without duplicating logic. Records travel camelCase, as produced
by the schedule and analytics layers.

Start with:
    uvicorn backend.app:app --reload --port 8000
"""
from __future__ import annotations

import logging
import os
import sys
from datetime import datetime, timezone
from typing import Optional

# Ensure the project root is on sys.path so config/raceselect imports work
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

import config
from raceselect import loader
from raceselect.models import Category, Mode
from raceselect.analysis import engine, recommender
from raceselect.analysis.scorer import InvalidModeError, get_mode_weights, parse_mode

logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(title="RaceSelect API", version="1.0.0")

# Allow the Next.js dev server and any local origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Request bodies
# ---------------------------------------------------------------------------

class ScoreRequest(BaseModel):
    opportunity: dict
    history: dict
    mode: str = config.DEFAULT_MODE
    now: Optional[datetime] = None
    include_breakdown: bool = False


class RecommendRequest(BaseModel):
    opportunities: list[dict]
    history: dict
    mode: str = config.DEFAULT_MODE
    category: Optional[str] = None
    min_score: Optional[float] = None
    max_results: Optional[int] = Field(default=None, ge=1)
    now: Optional[datetime] = None
    include_breakdown: bool = False


class CompareRequest(BaseModel):
    opportunities: list[dict]
    history: dict
    top_n: int = Field(default=config.COMPARE_TOP_N, ge=1)
    now: Optional[datetime] = None
    include_breakdown: bool = False


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _mode_or_400(mode: str) -> Mode:
    try:
        return parse_mode(mode)
    except InvalidModeError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _clock(now: datetime | None) -> engine.Clock | None:
    if now is None:
        return None
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return engine.fixed_clock(now)


def _category_or_400(category: str | None) -> Category | None:
    if category is None:
        return None
    try:
        return Category(category.strip().lower())
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Unknown category {category!r}")


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@app.get("/api/health")
def health() -> dict:
    return {"status": "ok"}


@app.get("/api/modes")
def list_modes() -> dict:
    return {
        "default": config.DEFAULT_MODE,
        "modes": {mode.value: get_mode_weights(mode).as_dict() for mode in Mode},
    }


@app.post("/api/score")
def score_opportunity(req: ScoreRequest) -> dict:
    mode = _mode_or_400(req.mode)
    try:
        opportunity = loader.opportunity_from_dict(req.opportunity)
        history = loader.history_from_dict(req.history)
    except loader.OpportunityDataError as e:
        raise HTTPException(status_code=422, detail=str(e))

    result = engine.score(opportunity, history, mode, clock=_clock(req.now))
    return loader.score_to_dict(result, include_breakdown=req.include_breakdown)


@app.post("/api/recommendations")
def recommendations(req: RecommendRequest) -> dict:
    mode = _mode_or_400(req.mode)
    category = _category_or_400(req.category)
    try:
        opportunities = [loader.opportunity_from_dict(o) for o in req.opportunities]
        history = loader.history_from_dict(req.history)
    except loader.OpportunityDataError as e:
        raise HTTPException(status_code=422, detail=str(e))

    result = recommender.recommend(
        opportunities,
        history,
        mode=mode,
        category=category,
        min_score=req.min_score,
        max_results=req.max_results,
        clock=_clock(req.now),
    )
    return {
        "mode": result.mode.value,
        "recommendations": [
            loader.scored_to_dict(s, include_breakdown=req.include_breakdown)
            for s in result.recommendations
        ],
        "experience": recommender.experience_summary(history),
        "metadata": result.metadata,
    }


@app.post("/api/modes/compare")
def compare_modes(req: CompareRequest) -> dict:
    try:
        opportunities = [loader.opportunity_from_dict(o) for o in req.opportunities]
        history = loader.history_from_dict(req.history)
    except loader.OpportunityDataError as e:
        raise HTTPException(status_code=422, detail=str(e))

    results = recommender.compare_modes(
        opportunities, history, clock=_clock(req.now), top_n=req.top_n,
    )
    return {
        "modes": {
            mode.value: [
                loader.scored_to_dict(s, include_breakdown=req.include_breakdown) for s in picks
            ]
            for mode, picks in results.items()
        },
    }
