from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from talenthub.database import get_db
from talenthub.errors import AuthFailure
from talenthub.repositories import CandidateRepository, UserRepository
from talenthub.schemas import PublicUser
from talenthub.services.auth import decode_access_token

# auto_error=False so a missing header is reported as 401 with our envelope
bearer_scheme = HTTPBearer(auto_error=False)


def get_user_repository(db: AsyncSession = Depends(get_db)) -> UserRepository:
    return UserRepository(db)


def get_candidate_repository(db: AsyncSession = Depends(get_db)) -> CandidateRepository:
    return CandidateRepository(db)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    users: UserRepository = Depends(get_user_repository),
) -> PublicUser:
    """Get the current authenticated user. Raises 401 if not authenticated.

    Use this as a dependency for protected routes.
    """
    if credentials is None:
        raise AuthFailure("Not authorized, no token")

    payload = decode_access_token(credentials.credentials)
    if not payload:
        raise AuthFailure("Not authorized, token failed")

    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise AuthFailure("Not authorized, token failed")

    user = await users.find_by_id(user_id)
    if user is None:
        raise AuthFailure("Not authorized, user not found")

    return user
