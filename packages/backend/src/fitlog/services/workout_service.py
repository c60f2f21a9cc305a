"""Workout service — CRUD with ownership enforcement.

Learn: Reads are public. Every write takes the caller's Identity and
checks it before touching the store:

- create: must be authenticated; the caller becomes the owner
- update/delete: AuthorizationGuard.require_owned — authenticated,
  then the workout must exist (404), then the caller must own it (403)

Entries are replaced wholesale on update, in the same transaction as
the workout row.
"""

from typing import Optional

import structlog

from fitlog.auth.guard import AuthorizationGuard, require_authenticated
from fitlog.auth.identity import Identity
from fitlog.db.models import Workout, WorkoutEntry
from fitlog.errors import ResourceNotFound
from fitlog.stores.base import WorkoutStore

logger = structlog.get_logger()

WORKOUT_FIELDS = ("title", "description", "duration_minutes", "calories_burned")
ENTRY_FIELDS = (
    "exercise_name",
    "sets",
    "reps",
    "duration_seconds",
    "weight",
    "notes",
    "order_index",
)


def _build_entries(entries: list[dict]) -> list[WorkoutEntry]:
    return [
        WorkoutEntry(**{k: entry.get(k) for k in ENTRY_FIELDS if k in entry})
        for entry in entries
    ]


class WorkoutService:
    """Business logic for workouts."""

    def __init__(self, workouts: WorkoutStore):
        self.workouts = workouts
        self.guard = AuthorizationGuard(workouts.get_owner, resource="workout")

    async def get(self, workout_id: int) -> Workout:
        workout = await self.workouts.get(workout_id)
        if workout is None:
            raise ResourceNotFound(f"workout {workout_id} not found")
        return workout

    async def create(self, identity: Identity, data: dict) -> Workout:
        user = require_authenticated(identity)

        workout = Workout(
            user_id=user.id,
            **{k: data[k] for k in WORKOUT_FIELDS if k in data},
        )
        workout.entries = _build_entries(data.get("entries") or [])

        workout = await self.workouts.create(workout)
        logger.info(
            "fitlog.workout.created",
            workout_id=workout.id,
            user_id=user.id,
            entries=len(workout.entries),
        )
        return workout

    async def update(
        self, identity: Identity, workout_id: int, changes: dict
    ) -> Workout:
        """Apply a partial update. Keys absent from changes are left alone."""
        user = await self.guard.require_owned(identity, workout_id)

        workout = await self.get(workout_id)
        for key in WORKOUT_FIELDS:
            if changes.get(key) is not None:
                setattr(workout, key, changes[key])

        entries: Optional[list[dict]] = changes.get("entries")
        if entries is not None:
            workout.entries = _build_entries(entries)

        workout = await self.workouts.update(workout)
        logger.info("fitlog.workout.updated", workout_id=workout_id, user_id=user.id)
        return workout

    async def delete(self, identity: Identity, workout_id: int) -> None:
        user = await self.guard.require_owned(identity, workout_id)

        if not await self.workouts.delete(workout_id):
            # Deleted between the ownership check and now
            raise ResourceNotFound(f"workout {workout_id} not found")
        logger.info("fitlog.workout.deleted", workout_id=workout_id, user_id=user.id)
