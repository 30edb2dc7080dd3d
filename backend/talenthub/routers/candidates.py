import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.exc import SQLAlchemyError

from talenthub.dependencies import get_candidate_repository, get_current_user
from talenthub.errors import NotFound, UnexpectedError
from talenthub.models import Candidate
from talenthub.repositories import CandidateRepository
from talenthub.schemas import CandidateCreate, CandidateResponse, PublicUser
from talenthub.schemas.candidate import MAX_INTEGER

logger = logging.getLogger(__name__)

# Every candidate route requires a bearer token
router = APIRouter(dependencies=[Depends(get_current_user)])

CANDIDATE_NOT_FOUND_MESSAGE = "Candidate not found"

# Ids beyond the INTEGER column range are rejected before reaching the store
CandidateId = Annotated[int, Path(le=MAX_INTEGER)]


def _serialize(candidate: Candidate) -> dict:
    return CandidateResponse.model_validate(candidate).model_dump(mode="json")


@router.get("")
async def list_candidates(
    user: PublicUser = Depends(get_current_user),
    candidates: CandidateRepository = Depends(get_candidate_repository),
):
    """List the current user's candidates, newest first."""
    try:
        rows = await candidates.find_all(user.id)
    except SQLAlchemyError:
        logger.exception("Failed to fetch candidates for user %d", user.id)
        raise UnexpectedError("Error fetching candidates")

    return {
        "status": "success",
        "count": len(rows),
        "data": {"candidates": [_serialize(c) for c in rows]},
    }


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_candidate(
    candidate_data: CandidateCreate,
    user: PublicUser = Depends(get_current_user),
    candidates: CandidateRepository = Depends(get_candidate_repository),
):
    """Create a candidate owned by the current user."""
    try:
        candidate = await candidates.create(candidate_data, user.id)
    except SQLAlchemyError:
        logger.exception("Failed to create candidate for user %d", user.id)
        raise UnexpectedError("Error creating candidate")

    return {"status": "success", "data": {"candidate": _serialize(candidate)}}


@router.get("/{candidate_id}")
async def get_candidate(
    candidate_id: CandidateId,
    user: PublicUser = Depends(get_current_user),
    candidates: CandidateRepository = Depends(get_candidate_repository),
):
    """Fetch a single candidate owned by the current user."""
    try:
        candidate = await candidates.find_by_id(candidate_id, user.id)
    except SQLAlchemyError:
        logger.exception("Failed to fetch candidate %d for user %d", candidate_id, user.id)
        raise UnexpectedError("Error fetching candidate")

    if candidate is None:
        raise NotFound(CANDIDATE_NOT_FOUND_MESSAGE)

    return {"status": "success", "data": {"candidate": _serialize(candidate)}}


@router.put("/{candidate_id}")
async def update_candidate(
    candidate_id: CandidateId,
    candidate_data: CandidateCreate,
    user: PublicUser = Depends(get_current_user),
    candidates: CandidateRepository = Depends(get_candidate_repository),
):
    """Replace every field of a candidate owned by the current user."""
    try:
        candidate = await candidates.update(candidate_id, candidate_data, user.id)
    except SQLAlchemyError:
        logger.exception("Failed to update candidate %d for user %d", candidate_id, user.id)
        raise UnexpectedError("Error updating candidate")

    if candidate is None:
        raise NotFound(CANDIDATE_NOT_FOUND_MESSAGE)

    return {"status": "success", "data": {"candidate": _serialize(candidate)}}


@router.delete("/{candidate_id}")
async def delete_candidate(
    candidate_id: CandidateId,
    user: PublicUser = Depends(get_current_user),
    candidates: CandidateRepository = Depends(get_candidate_repository),
):
    """Delete a candidate owned by the current user."""
    try:
        deleted = await candidates.delete(candidate_id, user.id)
    except SQLAlchemyError:
        logger.exception("Failed to delete candidate %d for user %d", candidate_id, user.id)
        raise UnexpectedError("Error deleting candidate")

    if not deleted:
        raise NotFound(CANDIDATE_NOT_FOUND_MESSAGE)

    return {"status": "success", "message": "Candidate deleted successfully"}
