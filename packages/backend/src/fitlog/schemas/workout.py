"""Pydantic schemas for workouts and their entries.

Learn: An entry is rep-based or timed — exactly one of `reps` and
`duration_seconds` must be set. WorkoutUpdate is a partial update: every
field is optional, and `entries`, when present, replaces all entries.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, model_validator


# ─── Entries ────────────────────────────────────────────

class WorkoutEntryIn(BaseModel):
    exercise_name: str = Field(..., min_length=1, max_length=255)
    sets: int = Field(..., gt=0)
    reps: Optional[int] = Field(None, gt=0)
    duration_seconds: Optional[int] = Field(None, gt=0)
    weight: Optional[float] = Field(None, ge=0)
    notes: str = ""
    order_index: int = Field(..., ge=0)

    @model_validator(mode="after")
    def reps_or_duration(self):
        if (self.reps is None) == (self.duration_seconds is None):
            raise ValueError("exactly one of reps or duration_seconds is required")
        return self


class WorkoutEntryRead(BaseModel):
    id: int
    workout_id: int
    exercise_name: str
    sets: int
    reps: Optional[int] = None
    duration_seconds: Optional[int] = None
    weight: Optional[float] = None
    notes: str
    order_index: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


# ─── Workouts ───────────────────────────────────────────

class WorkoutCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    duration_minutes: int = Field(0, ge=0)
    calories_burned: int = Field(0, ge=0)
    entries: list[WorkoutEntryIn] = Field(default_factory=list)


class WorkoutUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    duration_minutes: Optional[int] = Field(None, ge=0)
    calories_burned: Optional[int] = Field(None, ge=0)
    entries: Optional[list[WorkoutEntryIn]] = None


class WorkoutRead(BaseModel):
    id: int
    user_id: int
    title: str
    description: str
    duration_minutes: int
    calories_burned: int
    created_at: datetime
    updated_at: datetime
    entries: list[WorkoutEntryRead] = []

    model_config = {"from_attributes": True}
