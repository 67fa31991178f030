import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Response

from auth import CurrentUser, get_current_user
from errors import UpstreamError, ValidationError
from schemas import CalendarDate, GoalIn, PersonalGoalIn, PersonalGoalUpdate
from services.goal_service import GoalService, PersonalGoalService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/goals", tags=["Goals"])
personal_router = APIRouter(prefix="/api/personal-goals", tags=["Personal Goals"])


@router.get("")
async def list_goals(
    month: Optional[CalendarDate] = None,
    user: CurrentUser = Depends(get_current_user),
):
    if not month:
        raise ValidationError('The "month" parameter is required.')
    try:
        return GoalService.get_for_month(user.db, user.id, month)
    except UpstreamError as e:
        logger.error(f"Error fetching goals: {e}")
        raise UpstreamError("Could not fetch the goals.") from e


@router.post("", status_code=201)
async def save_goal(goal_data: GoalIn, user: CurrentUser = Depends(get_current_user)):
    """Create the goal, or overwrite the amount for an existing category/month."""
    try:
        goal = GoalService.save(user.db, user.id, goal_data.model_dump(mode="json"))
        return {"message": "Goal saved successfully!", "goal": goal}
    except UpstreamError as e:
        logger.error(f"Error saving goal: {e}")
        raise UpstreamError("Could not save the goal.") from e


@router.delete("/{goal_id}", status_code=204)
async def delete_goal(goal_id: UUID, user: CurrentUser = Depends(get_current_user)):
    try:
        GoalService.delete(user.db, user.id, str(goal_id))
        return Response(status_code=204)
    except UpstreamError as e:
        logger.error(f"Error deleting goal: {e}")
        raise UpstreamError("Could not delete the goal.") from e


# ── Personal goals ────────────────────────────────────────────────
@personal_router.get("")
async def list_personal_goals(user: CurrentUser = Depends(get_current_user)):
    try:
        return PersonalGoalService.get_all(user.db, user.id)
    except UpstreamError as e:
        logger.error(f"Error fetching personal goals: {e}")
        raise UpstreamError("Could not fetch the personal goals.") from e


@personal_router.post("", status_code=201)
async def create_personal_goal(goal_data: PersonalGoalIn, user: CurrentUser = Depends(get_current_user)):
    try:
        goal = PersonalGoalService.create(user.db, user.id, goal_data.model_dump())
        return {"message": "Personal goal created successfully!", "goal": goal}
    except UpstreamError as e:
        logger.error(f"Error creating personal goal: {e}")
        raise UpstreamError("Could not create the personal goal.") from e


@personal_router.put("/{goal_id}")
async def update_personal_goal(goal_id: UUID, goal_data: PersonalGoalUpdate,
                               user: CurrentUser = Depends(get_current_user)):
    try:
        goal = PersonalGoalService.replace(user.db, user.id, str(goal_id), goal_data.model_dump())
        return {"message": "Personal goal updated successfully!", "goal": goal}
    except UpstreamError as e:
        logger.error(f"Error updating personal goal: {e}")
        raise UpstreamError("Could not update the personal goal.") from e


@personal_router.delete("/{goal_id}", status_code=204)
async def delete_personal_goal(goal_id: UUID, user: CurrentUser = Depends(get_current_user)):
    try:
        PersonalGoalService.delete(user.db, user.id, str(goal_id))
        return Response(status_code=204)
    except UpstreamError as e:
        logger.error(f"Error deleting personal goal: {e}")
        raise UpstreamError("Could not delete the personal goal.") from e
