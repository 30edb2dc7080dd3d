from talenthub.repositories.users import UserRepository
from talenthub.repositories.candidates import CandidateRepository

__all__ = ["UserRepository", "CandidateRepository"]
