"""User directory: lookups and creation of user records."""

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import get_settings
from app.errors import AlreadyExists
from app.models.user import User, UserRole
from app.services.identifiers import Identifier


class UserDirectory:
    """Repository over the ``user`` table. Methods never commit."""

    def get(self, db: Session, user_id: int) -> User | None:
        return db.get(User, user_id)

    def find_by_identifier(self, db: Session, identifier: Identifier) -> User | None:
        return db.query(User).filter(identifier.column == identifier.value).first()

    def identifier_taken(self, db: Session, email: str, phone_number: str) -> bool:
        existing = (
            db.query(User.id)
            .filter(or_(User.email == email, User.phone_number == phone_number))
            .first()
        )
        return existing is not None

    def create(
        self,
        db: Session,
        *,
        email: str,
        phone_number: str,
        password_hash: str,
        first_name: str,
        last_name: str,
        role: UserRole = UserRole.CANDIDATE,
        is_verified: bool = False,
        is_active: bool | None = None,
    ) -> User:
        """Add a user and flush so it has an id.

        A concurrent registration of the same email or phone number surfaces
        as AlreadyExists; the session is rolled back in that case.
        """
        if is_active is None:
            is_active = get_settings().ACCOUNTS_START_ACTIVE
        user = User(
            email=email,
            phone_number=phone_number,
            password_hash=password_hash,
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            role=role.value,
            is_verified=is_verified,
            is_active=is_active,
        )
        db.add(user)
        try:
            db.flush()
        except IntegrityError:
            db.rollback()
            raise AlreadyExists() from None
        return user


_user_directory: UserDirectory | None = None


def get_user_directory() -> UserDirectory:
    """Get singleton user directory instance."""
    global _user_directory
    if _user_directory is None:
        _user_directory = UserDirectory()
    return _user_directory
