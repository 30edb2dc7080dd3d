from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from talenthub.errors import DuplicateKeyError
from talenthub.models import User
from talenthub.schemas import PublicUser
from talenthub.services.auth import hash_password

DUPLICATE_USER_MESSAGE = "User with this email already exists"


class UserRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, name: str, email: str, password: str) -> User:
        """Persist a new user, storing only the bcrypt hash of ``password``.

        Raises DuplicateKeyError if the email is already registered.
        """
        # bcrypt is deliberately slow; keep it off the event loop
        password_hash = await run_in_threadpool(hash_password, password)
        user = User(name=name, email=email, password_hash=password_hash)
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise DuplicateKeyError(DUPLICATE_USER_MESSAGE)
        except SQLAlchemyError:
            await self.db.rollback()
            raise
        await self.db.refresh(user)
        return user

    async def find_by_email(self, email: str) -> User | None:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalars().first()

    async def find_by_id(self, user_id: int) -> PublicUser | None:
        result = await self.db.execute(
            select(User.id, User.name, User.email, User.created_at).where(User.id == user_id)
        )
        row = result.first()
        if row is None:
            return None
        return PublicUser.model_validate(row)
