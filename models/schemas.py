"""
Pydantic schemas for data validation.
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator


# ============ Player Schemas ============

class PlayerCreate(BaseModel):
    """Schema for a roster entry."""
    player_id: str = Field(..., min_length=1, max_length=200)
    display_name: str = Field(default="", max_length=200)
    seed: int = Field(default=0, ge=0)

    @field_validator("player_id")
    @classmethod
    def id_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Player id cannot be empty")
        return v.strip()


# ============ Map Ban Schemas ============

class MapBanSubmission(BaseModel):
    """One team's priority-ordered ban list (index 0 = highest priority)."""
    bans: list[str] = Field(default_factory=list)

    @field_validator("bans")
    @classmethod
    def bans_valid(cls, v: list[str]) -> list[str]:
        cleaned = [name.strip() for name in v]
        if any(not name for name in cleaned):
            raise ValueError("Map ban names cannot be empty")
        if len(set(cleaned)) != len(cleaned):
            raise ValueError("The same map cannot be banned twice")
        return cleaned


# ============ Match Schemas ============

class MatchReport(BaseModel):
    """A score report for one match. winner_id None reports a draw."""
    winner_id: Optional[str] = None
    score1: int = Field(default=0, ge=0)
    score2: int = Field(default=0, ge=0)
    map_results: list[str] = Field(default_factory=list)


# ============ Settings Schemas ============

class TournamentSettingsSchema(BaseModel):
    """Overrides read from the settings file."""
    include_third_place_match: bool = False
    best_of_group_stage: int = Field(default=3, ge=1, le=9)
    best_of_quarterfinals: int = Field(default=3, ge=1, le=9)
    best_of_semifinals: int = Field(default=3, ge=1, le=9)
    best_of_playoffs: int = Field(default=3, ge=1, le=9)
    best_of_finals: int = Field(default=5, ge=1, le=9)
    best_of_third_place: int = Field(default=3, ge=1, le=9)
    matches_per_player: int = Field(default=0, ge=0)
