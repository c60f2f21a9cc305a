"""Workout API routes.

Learn: GET is public. Writes need a token, and update/delete also need
ownership. The order of checks is fixed by the guard:

    401 anonymous → 404 no such workout → 403 someone else's → do it
"""

from fastapi import APIRouter, Depends, HTTPException

from fitlog.auth.dependencies import BEARER_CHALLENGE, authenticate
from fitlog.auth.identity import Identity
from fitlog.errors import AuthenticationError, AuthorizationError, FitlogError, NotFoundError
from fitlog.schemas.workout import WorkoutCreate, WorkoutRead, WorkoutUpdate
from fitlog.services.workout_service import WorkoutService
from fitlog.stores import WorkoutStore, get_workout_store

router = APIRouter(prefix="/workouts")


def _svc(workouts: WorkoutStore = Depends(get_workout_store)) -> WorkoutService:
    return WorkoutService(workouts)


def _http_error(e: FitlogError, action: str) -> HTTPException:
    """Map a denial to its status: 401, then 404, then 403."""
    if isinstance(e, AuthenticationError):
        return HTTPException(
            status_code=401,
            detail=f"You must be logged in to {action} a workout",
            headers=BEARER_CHALLENGE,
        )
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=404, detail="Workout not found")
    return HTTPException(
        status_code=403, detail=f"You are not allowed to {action} this workout"
    )


@router.get("/{workout_id}", response_model=WorkoutRead)
async def get_workout(workout_id: int, svc: WorkoutService = Depends(_svc)):
    try:
        return await svc.get(workout_id)
    except NotFoundError as e:
        raise _http_error(e, "view")


@router.post("", response_model=WorkoutRead, status_code=201)
async def create_workout(
    body: WorkoutCreate,
    identity: Identity = Depends(authenticate),
    svc: WorkoutService = Depends(_svc),
):
    try:
        return await svc.create(identity, body.model_dump())
    except (AuthenticationError, AuthorizationError, NotFoundError) as e:
        raise _http_error(e, "create")


@router.put("/{workout_id}", response_model=WorkoutRead)
async def update_workout(
    workout_id: int,
    body: WorkoutUpdate,
    identity: Identity = Depends(authenticate),
    svc: WorkoutService = Depends(_svc),
):
    """Partial update. `entries`, when sent, replaces all entries."""
    try:
        return await svc.update(identity, workout_id, body.model_dump(exclude_unset=True))
    except (AuthenticationError, AuthorizationError, NotFoundError) as e:
        raise _http_error(e, "update")


@router.delete("/{workout_id}", status_code=204)
async def delete_workout(
    workout_id: int,
    identity: Identity = Depends(authenticate),
    svc: WorkoutService = Depends(_svc),
):
    try:
        await svc.delete(identity, workout_id)
    except (AuthenticationError, AuthorizationError, NotFoundError) as e:
        raise _http_error(e, "delete")
