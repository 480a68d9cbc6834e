"""
Signup workflow: Person record, then the account referencing it, then the
link back from the Person to the account.

By default each step commits on its own and nothing is compensated when a
later step fails, so a Person may be left without an account (or an
account/Person pair without the link). Existing clients and data depend on
that behaviour. ``atomic=True`` runs the three writes in one transaction
instead.
"""
from sqlalchemy.orm import Session
import logging

from ..models.person import Person
from ..schemas.auth import SignupRequest, SignupResponse
from .auth_service import AuthService

logger = logging.getLogger(__name__)

class SignupError(Exception):
    """Opaque signup failure. ``step`` names the failed step for the logs."""

    def __init__(self, message: str, step: str):
        super().__init__(message)
        self.step = step

class SignupService:
    def __init__(self, db: Session, atomic: bool = False):
        self.db = db
        self.atomic = atomic
        self.auth_service = AuthService(db)

    def signup(self, data: SignupRequest) -> SignupResponse:
        if self.atomic:
            return self._signup_atomic(data)
        return self._signup(data)

    def _signup(self, data: SignupRequest) -> SignupResponse:
        step = "create_person"
        try:
            person = Person(
                firstname=data.firstname,
                lastname=data.lastname,
                birthdate=data.birthdate,
            )
            self.db.add(person)
            self.db.commit()
            self.db.refresh(person)

            step = "create_user"
            user_id = self.auth_service.create_user(
                data.username,
                data.email,
                data.password,
                attributes={"personId": person.id},
            )

            step = "link_person"
            self._link_person(person.id, user_id)
            self.db.commit()

            step = "fetch_user"
            return self._build_response(user_id, person.id)
        except Exception as e:
            self.db.rollback()
            logger.error(f"Signup failed at step {step}: {e!r}")
            raise SignupError(str(e), step) from e

    def _signup_atomic(self, data: SignupRequest) -> SignupResponse:
        step = "create_person"
        try:
            person = Person(
                firstname=data.firstname,
                lastname=data.lastname,
                birthdate=data.birthdate,
            )
            self.db.add(person)
            self.db.flush()

            step = "create_user"
            user_id = self.auth_service.create_user(
                data.username,
                data.email,
                data.password,
                attributes={"personId": person.id},
                commit=False,
            )

            step = "link_person"
            self._link_person(person.id, user_id)

            step = "commit"
            self.db.commit()
            logger.info(f"Committed signup of user {user_id} (person {person.id})")

            step = "fetch_user"
            return self._build_response(user_id, person.id)
        except Exception as e:
            self.db.rollback()
            logger.error(f"Atomic signup failed at step {step}, rolled back: {e!r}")
            raise SignupError(str(e), step) from e

    def _link_person(self, person_id: int, user_id: int):
        self.db.query(Person).filter(Person.id == person_id).update(
            {"user_id": user_id}
        )

    def _build_response(self, user_id: int, person_id: int) -> SignupResponse:
        user = self.auth_service.get_user_by_id(user_id)
        return SignupResponse(
            id=user_id,
            username=user.username if user else None,
            email=user.email if user else None,
            person_id=person_id,
        )
