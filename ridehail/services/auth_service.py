"""
Identity: registration, login, logout and bearer-token authentication.

Tokens are JWTs, but a token is only honoured while its ``jti`` is still
recorded in ``access_tokens``; logout deletes that record.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from ridehail.domain.enums import UserRole
from ridehail.domain.errors import Unauthenticated, ValidationFailed
from ridehail.infrastructure.models import UserModel
from ridehail.infrastructure.repositories import (
    AccessTokenRepository,
    UserRepository,
)
from ridehail.infrastructure.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    new_token_id,
    verify_password,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthContext:
    """The authenticated caller, passed explicitly into every operation."""

    user: UserModel
    token_id: str


class AuthService:
    def __init__(self, session: AsyncSession):
        self.users = UserRepository(session)
        self.tokens = AccessTokenRepository(session)

    async def register(
        self,
        *,
        name: str,
        email: str,
        phone: str,
        password: str,
        role: UserRole,
    ) -> tuple[UserModel, str]:
        errors: dict[str, list[str]] = {}
        if await self.users.email_taken(email):
            errors["email"] = ["The email has already been taken."]
        if await self.users.phone_taken(phone):
            errors["phone"] = ["The phone has already been taken."]
        if errors:
            raise ValidationFailed(errors)

        user = await self.users.create(
            UserModel(
                name=name,
                email=email,
                phone=phone,
                password_hash=hash_password(password),
                role=role,
            )
        )
        logger.info("Registered user %d as %s", user.id, UserRole(user.role).value)
        return user, await self._issue_token(user)

    async def login(self, email: str, password: str) -> tuple[UserModel, str]:
        user = await self.users.get_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            raise Unauthenticated("Invalid credentials")
        return user, await self._issue_token(user)

    async def logout(self, auth: AuthContext) -> None:
        await self.tokens.delete_by_jti(auth.token_id)
        logger.info("User %d logged out", auth.user.id)

    async def authenticate(self, token: str) -> AuthContext:
        claims = decode_access_token(token)
        if not claims or "jti" not in claims or "sub" not in claims:
            raise Unauthenticated()
        record = await self.tokens.get_by_jti(claims["jti"])
        if record is None or str(record.user_id) != claims["sub"]:
            raise Unauthenticated()
        user = await self.users.get_by_id(record.user_id)
        if user is None:
            raise Unauthenticated()
        return AuthContext(user=user, token_id=record.jti)

    async def _issue_token(self, user: UserModel) -> str:
        jti = new_token_id()
        await self.tokens.create(user_id=user.id, jti=jti)
        return create_access_token(user.id, jti)
