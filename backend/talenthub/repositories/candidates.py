"""Candidate persistence. Every query is scoped to the owning user.

A candidate that exists but belongs to someone else is indistinguishable from
one that does not exist: both come back as ``None`` / ``False``.
"""

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from talenthub.errors import DuplicateKeyError
from talenthub.models import Candidate
from talenthub.schemas import CandidateCreate

DUPLICATE_CANDIDATE_MESSAGE = "Candidate with this email already exists"


class CandidateRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, data: CandidateCreate, owner_id: int) -> Candidate:
        candidate = Candidate(**data.model_dump(), user_id=owner_id)
        self.db.add(candidate)
        await self._commit()
        await self.db.refresh(candidate)
        return candidate

    async def find_all(self, owner_id: int) -> list[Candidate]:
        """Return the owner's candidates, newest first."""
        result = await self.db.execute(
            select(Candidate)
            .where(Candidate.user_id == owner_id)
            .order_by(Candidate.created_at.desc(), Candidate.id.desc())
        )
        return list(result.scalars().all())

    async def find_by_id(self, candidate_id: int, owner_id: int) -> Candidate | None:
        result = await self.db.execute(
            select(Candidate).where(
                Candidate.id == candidate_id, Candidate.user_id == owner_id
            )
        )
        return result.scalars().first()

    async def update(
        self, candidate_id: int, data: CandidateCreate, owner_id: int
    ) -> Candidate | None:
        """Replace every mutable field of the candidate. None if not found for this owner."""
        candidate = await self.find_by_id(candidate_id, owner_id)
        if candidate is None:
            return None

        for field, value in data.model_dump().items():
            setattr(candidate, field, value)
        await self._commit()
        await self.db.refresh(candidate)
        return candidate

    async def delete(self, candidate_id: int, owner_id: int) -> bool:
        try:
            result = await self.db.execute(
                delete(Candidate).where(
                    Candidate.id == candidate_id, Candidate.user_id == owner_id
                )
            )
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise
        return result.rowcount > 0

    async def _commit(self) -> None:
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise DuplicateKeyError(DUPLICATE_CANDIDATE_MESSAGE)
        except SQLAlchemyError:
            await self.db.rollback()
            raise
