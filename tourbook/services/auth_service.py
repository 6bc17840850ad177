import logging
from typing import Optional, Tuple

import bcrypt
from fastapi import HTTPException

from tourbook.core import BaseService, ValidationError, AuthenticationError, ConflictError
from tourbook.infrastructure.repositories import UserRepository
from tourbook.models import User
from tourbook.security import mint_tokens, decode_token, create_token, REFRESH
from tourbook.roles import Role

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


class AuthService(BaseService):
    """Authentication service handling local accounts and tokens"""

    def __init__(self, session, user_repo: Optional[UserRepository] = None):
        super().__init__(session)
        self.user_repo = user_repo or UserRepository(session)

    async def register(self, name: str, email: str, password: str) -> Tuple[User, str, str]:
        """Create a customer account and log it in"""
        user = await self.create_user(name=name, email=email, password=password, role=Role.customer.value)
        access_token, refresh_token = mint_tokens(sub=user.id, role=user.role)
        return user, access_token, refresh_token

    async def authenticate_user(self, email: str, password: str) -> Tuple[User, str, str]:
        """Authenticate user with email and password"""
        user = await self.user_repo.get_by_email(email)
        if not user:
            raise AuthenticationError("Invalid email or password")

        if not self._verify_password(password, user.password_hash):
            raise AuthenticationError("Invalid email or password")

        access_token, refresh_token = mint_tokens(sub=user.id, role=user.role)
        return user, access_token, refresh_token

    async def refresh_access_token(self, refresh_token: str) -> str:
        """Generate new access token from refresh token"""
        try:
            payload = decode_token(refresh_token)
        except HTTPException as exc:
            raise AuthenticationError("Invalid refresh token") from exc

        if payload.get("typ") != REFRESH:
            raise AuthenticationError("Invalid refresh token")

        user = await self.user_repo.get(payload.get("sub"))
        if not user:
            raise AuthenticationError("User no longer exists")

        return create_token(sub=user.id, role=user.role)

    async def get_user(self, user_id: str) -> User:
        user = await self.user_repo.get(user_id)
        if not user:
            raise AuthenticationError("User not found")
        return user

    async def create_user(
        self,
        name: str,
        email: str,
        password: str,
        role: str,
    ) -> User:
        """Create a new user with hashed password"""
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
                field="password"
            )

        valid_roles = [r.value for r in Role]
        if role not in valid_roles:
            raise ValidationError(f"Invalid role. Must be one of: {', '.join(valid_roles)}", field="role")

        if await self.user_repo.exists_by_email(email):
            raise ConflictError("Email already registered")

        user = await self.user_repo.create(obj_in={
            "name": name,
            "email": email.lower(),
            "password_hash": self._hash_password(password),
            "role": role,
        })
        logger.info("Created %s account %s", role, user.email)
        return user

    def _hash_password(self, password: str) -> str:
        """Hash password using bcrypt"""
        return bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt()).decode('utf-8')

    def _verify_password(self, plain_password: str, hashed_password: str) -> bool:
        """Verify password against hash"""
        try:
            return bcrypt.checkpw(
                plain_password.encode('utf-8'),
                hashed_password.encode('utf-8')
            )
        except ValueError as e:
            logger.warning("Password verification error: %s", e)
            return False
