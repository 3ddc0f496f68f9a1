# HealthPlan Admin - Health Insurance Administration Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Login accounts and token issuing."""

import logging
from uuid import uuid4

from beartype import beartype

from ..core.result_types import Err, Ok, Result
from ..core.security import IssuedToken, Security
from ..models.admin import AdminUser, AdminUserCreate, UserType
from ..models.base import utc_now
from ..repositories.base import DuplicateRecordError, Repository
from ..repositories.filters import eq

logger = logging.getLogger(__name__)

# Roles that only make sense inside one insurance company.
COMPANY_SCOPED_ROLES = frozenset(
    {UserType.INSURANCE_ADMIN, UserType.CORPORATE_ADMIN, UserType.PROVIDER_ADMIN}
)


class AuthService:
    """Creates login accounts and authenticates them."""

    def __init__(self, users: Repository[AdminUser], security: Security) -> None:
        if not users or not hasattr(users, "insert"):
            raise ValueError("Admin user repository required")
        self._users = users
        self._security = security

    @beartype
    async def create_user(self, user_data: AdminUserCreate) -> Result[AdminUser, str]:
        """Create an account; usernames are globally unique."""
        if user_data.user_type in COMPANY_SCOPED_ROLES and not user_data.insurance_company_id:
            return Err(f"Invalid account: {user_data.user_type.value} requires an insurance company")
        if await self._users.exists((eq("username", user_data.username),)):
            return Err(f"User {user_data.username} already exists")

        now = utc_now()
        user = AdminUser(
            id=uuid4(),
            created_at=now,
            updated_at=now,
            username=user_data.username,
            email=user_data.email,
            password_hash=self._security.hash_password(user_data.password),
            user_type=user_data.user_type,
            insurance_company_id=user_data.insurance_company_id,
            corporate_client_id=user_data.corporate_client_id,
        )
        try:
            user = await self._users.insert(user)
        except DuplicateRecordError:
            return Err(f"User {user_data.username} already exists")

        logger.info("Created %s account %s", user.user_type.value, user.username)
        return Ok(user)

    @beartype
    async def authenticate(self, username: str, password: str) -> Result[AdminUser, str]:
        user = await self._users.find_one((eq("username", username),))
        # Same message for unknown users and bad passwords.
        if user is None or not self._security.verify_password(password, user.password_hash):
            logger.warning("Rejected login for %s", username)
            return Err("Unauthorized: invalid username or password")
        if not user.is_active:
            logger.warning("Rejected login for inactive account %s", username)
            return Err("Unauthorized: account is disabled")
        return Ok(user)

    @beartype
    async def login(self, username: str, password: str) -> Result[IssuedToken, str]:
        """Authenticate and issue a bearer token carrying role and tenant."""
        result = await self.authenticate(username, password)
        if isinstance(result, Err):
            return result
        user = result.value
        return Ok(
            self._security.create_access_token(
                subject=str(user.id),
                user_type=user.user_type.value,
                insurance_company_id=(
                    str(user.insurance_company_id) if user.insurance_company_id else None
                ),
                corporate_client_id=(
                    str(user.corporate_client_id) if user.corporate_client_id else None
                ),
            )
        )

    @beartype
    async def ensure_bootstrap_admin(
        self, username: str, password: str, email: str
    ) -> Result[AdminUser, str]:
        """Create the platform ADMIN account unless it already exists."""
        existing = await self._users.find_one((eq("username", username),))
        if existing is not None:
            return Ok(existing)
        return await self.create_user(
            AdminUserCreate(
                username=username,
                email=email,
                password=password,
                user_type=UserType.ADMIN,
            )
        )
