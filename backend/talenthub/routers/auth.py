import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import SQLAlchemyError
from starlette.concurrency import run_in_threadpool

from talenthub.dependencies import get_current_user, get_user_repository
from talenthub.errors import AuthFailure, DuplicateKeyError, UnexpectedError
from talenthub.repositories import UserRepository
from talenthub.repositories.users import DUPLICATE_USER_MESSAGE
from talenthub.schemas import LoginRequest, PublicUser, UserCreate
from talenthub.services.auth import create_user_token, dummy_verify_password, verify_password

logger = logging.getLogger(__name__)
router = APIRouter()

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"


def _auth_payload(user: PublicUser) -> dict:
    return {
        "status": "success",
        "data": {
            "user": user.model_dump(mode="json"),
            "token": create_user_token(user.id),
        },
    }


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserCreate,
    users: UserRepository = Depends(get_user_repository),
):
    """Register a new user and return it with an access token."""
    try:
        if await users.find_by_email(user_data.email):
            raise DuplicateKeyError(DUPLICATE_USER_MESSAGE)
        user = await users.create(user_data.name, user_data.email, user_data.password)
    except SQLAlchemyError:
        logger.exception("Failed to create user account for %s", user_data.email)
        raise UnexpectedError("Error registering user")

    logger.info("Registered user %d", user.id)
    return _auth_payload(PublicUser.model_validate(user))


@router.post("/login")
async def login(
    login_data: LoginRequest,
    users: UserRepository = Depends(get_user_repository),
):
    """Login and receive a JWT bearer token."""
    try:
        user = await users.find_by_email(login_data.email)
    except SQLAlchemyError:
        logger.exception("Failed to look up user %s", login_data.email)
        raise UnexpectedError("Error logging in")

    # Same failure for unknown email and wrong password
    if user is None:
        await run_in_threadpool(dummy_verify_password)
        raise AuthFailure(INVALID_CREDENTIALS_MESSAGE)
    password_ok = await run_in_threadpool(
        verify_password, login_data.password, user.password_hash
    )
    if not password_ok:
        raise AuthFailure(INVALID_CREDENTIALS_MESSAGE)

    return _auth_payload(PublicUser.model_validate(user))


@router.get("/me")
async def me(user: PublicUser = Depends(get_current_user)):
    """Get the currently authenticated user."""
    return {"status": "success", "data": {"user": user.model_dump(mode="json")}}
