# app/services/user_service.py
import logging
import uuid

from fastapi import HTTPException, status
from sqlmodel import Session

from app.models.user import User
from app.repositories.user_repo import UserRepository
from app.schemas.user import Role, UserAdminRead, UserUpdate, UserRoleUpdate

logger = logging.getLogger(__name__)


class UserService:
    """
    Business logic for User.

    Responsibilities:
      - profile edits (email and role are never editable by the owner)
      - admin listing and role changes
      - map domain errors to HTTP errors
    """

    def __init__(self, repo: UserRepository):
        self.repo = repo

    # ----- Self profile -----

    def update_me(
        self,
        session: Session,
        current_user: User,
        payload: UserUpdate,
    ) -> User:
        """
        Partial update for profile edits (name, phone).

        An explicit null phone clears it; an omitted phone is left alone.
        """
        if payload.name is not None:
            current_user.name = payload.name

        if "phone" in payload.model_fields_set:
            current_user.phone = payload.phone

        return self.repo.update(session, current_user)

    # ----- Admin operations -----

    def list_users(
        self,
        session: Session,
        role: Role | None,
        search: str | None,
        skip: int,
        limit: int,
    ) -> list[UserAdminRead]:
        rows = self.repo.list_with_order_counts(
            session, role=role, search=search, skip=skip, limit=limit
        )
        return [
            UserAdminRead.model_validate(user).model_copy(update={"order_count": count})
            for user, count in rows
        ]

    def _get_or_404(self, session: Session, user_id: uuid.UUID) -> User:
        user = self.repo.get_by_id(session, user_id)
        if not user:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="User not found",
            )
        return user

    def get_user(self, session: Session, user_id: uuid.UUID) -> UserAdminRead:
        user = self._get_or_404(session, user_id)
        dto = UserAdminRead.model_validate(user)
        return dto.model_copy(update={"order_count": self.repo.count_orders(session, user.id)})

    def update_role(
        self,
        session: Session,
        acting_admin: User,
        user_id: uuid.UUID,
        payload: UserRoleUpdate,
    ) -> UserAdminRead:
        """
        Change a user's role.

        Rules:
          - 404 if the user does not exist
          - 400 when an admin targets their own account
          - 400 when the user already has the requested role
        """
        user = self._get_or_404(session, user_id)

        if user.id == acting_admin.id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="You cannot change your own role",
            )
        if user.role == payload.role:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"User is already {payload.role}",
            )

        previous = user.role
        user.role = payload.role
        user = self.repo.update(session, user)
        logger.info(
            "Role change: %s %s -> %s (by %s)",
            user.email, previous, user.role, acting_admin.email,
        )
        return self.get_user(session, user.id)
