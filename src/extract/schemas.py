"""
Extract Layer Schemas

Raw record models for data coming from the Roblox games API.
These represent the structure of data as it comes from the primary endpoint.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class GameRecord(BaseModel):
    """One universe as returned by https://games.roblox.com/v1/games"""

    model_config = ConfigDict(extra="ignore")

    id: int = Field(..., description="Universe identifier")
    rootPlaceId: Optional[int] = Field(None, description="Start place of the universe")
    name: Optional[str] = Field(None, description="Display name")
    playing: int = Field(0, description="Concurrent players at fetch time")
    visits: int = Field(0, description="Lifetime visits")
    created: Optional[str] = Field(None, description="ISO 8601 creation timestamp")
    updated: Optional[str] = Field(None, description="ISO 8601 last update timestamp")

    @field_validator("playing", "visits", mode="before")
    @classmethod
    def missing_counter_is_zero(cls, v):
        """Counters come back as null for some private/under-review games"""
        return 0 if v is None else v


class VoteCounts(BaseModel):
    """One row of https://games.roblox.com/v1/games/votes"""

    model_config = ConfigDict(extra="ignore")

    id: int
    upVotes: int = Field(0, ge=0)
    downVotes: int = Field(0, ge=0)

    @field_validator("upVotes", "downVotes", mode="before")
    @classmethod
    def missing_votes_are_zero(cls, v):
        return 0 if v is None else v
