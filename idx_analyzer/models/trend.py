"""Trend template (Minervini) and market-cycle stage models."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel


class StageID(StrEnum):
    STAGE_1 = "Stage 1"
    STAGE_2 = "Stage 2"
    STAGE_3 = "Stage 3"
    STAGE_4 = "Stage 4"
    TRANSITION = "Transition"

    @property
    def label(self) -> str:
        return _STAGE_LABELS[self]


_STAGE_LABELS = {
    StageID.STAGE_1: "Base Building",
    StageID.STAGE_2: "Advancing",
    StageID.STAGE_3: "Topping",
    StageID.STAGE_4: "Declining",
    StageID.TRANSITION: "Transition",
}


class StageClassification(BaseModel):
    stage: StageID
    confidence: float  # 0-100, the winning stage score
    description: str
    signals: list[str]
    scores: dict[StageID, int]


class TrendCriteria(BaseModel):
    """The eight trend-template checks."""

    c1_price_above_ma150_ma200: bool
    c2_ma150_above_ma200: bool
    c3_ma200_trending_up: bool
    c4_ma50_above_ma150_ma200: bool
    c5_price_above_ma50: bool
    c6_price_30pct_above_low: bool
    c7_price_within_25pct_of_high: bool
    c8_relative_strength_above_70: bool

    @property
    def score(self) -> int:
        return sum(bool(v) for v in self.model_dump().values())


class TrendTemplateResult(BaseModel):
    ticker: str
    sector: str
    price: float
    criteria: TrendCriteria
    score: int  # 0-8
    rs: float   # sector-relative strength percentile
    week_52_high: float
    week_52_low: float
    sma_50: float | None
    sma_150: float | None
    sma_200: float | None
    stage: StageClassification | None = None
