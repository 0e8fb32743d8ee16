"""Verification code store.

Holds at most one outstanding code per user. Codes are looked up by value,
so a new code is drawn until it does not collide with an outstanding one.
"""

import logging
from datetime import datetime, timedelta

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import get_settings
from app.errors import CodeExpired, InvalidCode
from app.models.user import User
from app.models.verification_code import VerificationCode
from app.services.codes import CodeGenerator

logger = logging.getLogger("talent_onboarding")


class VerificationCodeStore:
    """Issues and consumes single-use, time-boxed codes."""

    MAX_ISSUE_ATTEMPTS = 3

    def __init__(self, generator: CodeGenerator | None = None, lifetime_minutes: int | None = None) -> None:
        self.generator = generator or CodeGenerator()
        if lifetime_minutes is None:
            lifetime_minutes = get_settings().VERIFICATION_CODE_EXPIRE_MINUTES
        self.lifetime = timedelta(minutes=lifetime_minutes)

    def _draw_code(self, db: Session) -> str:
        code = self.generator.generate()
        while db.query(VerificationCode.id).filter(VerificationCode.code == code).first() is not None:
            code = self.generator.generate()
        return code

    def outstanding_for(self, db: Session, user: User) -> VerificationCode | None:
        return db.query(VerificationCode).filter(VerificationCode.user_id == user.id).first()

    def stage(self, db: Session, user: User) -> VerificationCode:
        """Replace the user's code with a fresh one without committing."""
        db.query(VerificationCode).filter(VerificationCode.user_id == user.id).delete()
        record = VerificationCode(
            code=self._draw_code(db),
            expires_at=datetime.utcnow() + self.lifetime,
            user_id=user.id,
        )
        db.add(record)
        db.flush()
        return record

    def issue(self, db: Session, user: User) -> VerificationCode:
        """Replace the user's code with a fresh one and commit.

        Concurrent issuance for the same user trips the unique ``user_id``
        constraint; the loser rolls back and retries, so the last writer wins.
        """
        attempt = 1
        while True:
            try:
                record = self.stage(db, user)
                db.commit()
                return record
            except IntegrityError:
                db.rollback()
                if attempt >= self.MAX_ISSUE_ATTEMPTS:
                    raise
                logger.warning("Code issuance for user %s conflicted, retrying (%d)", user.id, attempt)
                attempt += 1

    def consume(self, db: Session, code: str) -> User:
        """Look up a code and mark it for deletion; return its owner.

        The deletion is left uncommitted so the caller commits it together
        with the change the code authorizes. Expired codes are deleted and
        committed immediately, then CodeExpired is raised.
        """
        record = db.query(VerificationCode).filter(VerificationCode.code == (code or "").strip()).first()
        if record is None:
            raise InvalidCode()

        if record.is_expired():
            user_id = record.user_id
            db.delete(record)
            db.commit()
            logger.info("Rejected expired code for user %s", user_id)
            raise CodeExpired()

        user = record.user
        db.delete(record)
        return user


_code_store: VerificationCodeStore | None = None


def get_code_store() -> VerificationCodeStore:
    """Get singleton code store instance."""
    global _code_store
    if _code_store is None:
        _code_store = VerificationCodeStore()
    return _code_store
