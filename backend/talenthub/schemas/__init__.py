from talenthub.schemas.user import UserBase, UserCreate, PublicUser
from talenthub.schemas.auth import LoginRequest
from talenthub.schemas.candidate import CandidateBase, CandidateCreate, CandidateResponse

__all__ = [
    "UserBase",
    "UserCreate",
    "PublicUser",
    "LoginRequest",
    "CandidateBase",
    "CandidateCreate",
    "CandidateResponse",
]
