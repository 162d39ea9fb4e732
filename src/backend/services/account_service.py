"""
Account Manager.

Orchestrates account creation, login, password changes, activation and
deletion on top of the Session Manager and bcrypt password hashing.
Independent steps run concurrently with asyncio.gather; dependent steps
run in order and stop at the first failure.
"""

import asyncio
from dataclasses import dataclass

import structlog
from email_validator import EmailNotValidError, validate_email

from core.config import settings
from core.errors import ClientError, ServerError, document_should_exist, document_shouldnt_exist
from core.security import (
    activation_id_from_bytes,
    generate_unique,
    hash_password,
    random_bytes,
    verify_password,
)
from models.cosmos_documents import SessionDocument, UserDocument
from repositories.provider import UserRepositoryProtocol
from services.session_service import SessionManager

logger = structlog.get_logger(__name__)

USERNAME_EXISTS = "Username already exists."
EMAIL_EXISTS = "Email already exists."
USER_NOT_FOUND = "Username or Email not found."
WRONG_PASSWORD = "You entered the wrong password."
ACTIVATION_NOT_FOUND = "Activation ID not found."
USER_MISSING = "User not found."
SERVER_FAULT = "Internal server error."


@dataclass
class NewAccount:
    """Result of creating an account."""

    user: UserDocument
    session: SessionDocument
    activation_id: str


@dataclass
class Login:
    """Result of authenticating."""

    user: UserDocument
    session: SessionDocument


def looks_like_email(value: str) -> bool:
    try:
        validate_email(value, check_deliverability=False, globally_deliverable=False)
    except EmailNotValidError:
        return False
    return True


class AccountManager:
    """User account lifecycle."""

    def __init__(self, users: UserRepositoryProtocol, session_manager: SessionManager):
        self.users = users
        self.session_manager = session_manager

    async def _generate_activation_id(self) -> str:
        async def draw() -> str:
            return activation_id_from_bytes(await random_bytes(settings.ACTIVATION_ID_NONCE_BYTES))

        return await generate_unique(draw, self.users.activation_id_exists)

    async def create(self, username: str, email: str, password: str) -> NewAccount:
        """
        Register a user and log them in.

        Sending the activation email is left to the caller.
        """
        username_taken, email_taken = await asyncio.gather(
            self.users.username_exists(username),
            self.users.email_exists(email),
        )
        document_shouldnt_exist(username_taken, USERNAME_EXISTS)
        document_shouldnt_exist(email_taken, EMAIL_EXISTS)

        password_hash, activation_id = await asyncio.gather(
            hash_password(password),
            self._generate_activation_id(),
        )

        user = await self.users.create(
            username=username,
            email=email,
            password_hash=password_hash,
            activation_id=activation_id,
        )
        session = await self.session_manager.create(user.id)
        logger.info("account_created", user_id=user.id)
        return NewAccount(user=user, session=session, activation_id=activation_id)

    async def authenticate(self, username_or_email: str, password: str) -> Login:
        """Log in by email or case-insensitive username. Deleted users can't log in."""
        if looks_like_email(username_or_email):
            user = await self.users.get_by_email(username_or_email)
        else:
            user = await self.users.get_by_username(username_or_email.lower())

        if user is None or user.is_deleted:
            raise ClientError(USER_NOT_FOUND)

        if not await verify_password(password, user.password_hash):
            logger.info("authentication_failed", user_id=user.id)
            raise ClientError(WRONG_PASSWORD)

        session = await self.session_manager.create(user.id)
        logger.info("user_authenticated", user_id=user.id)
        return Login(user=user, session=session)

    async def update_password(self, token: str, old_password: str, new_password: str) -> None:
        """Change the password of the caller after checking the old one."""
        user_id = await self.session_manager.resolve(token)

        user = await self.users.get_by_id(user_id)
        document_should_exist(user, USER_MISSING)

        if not await verify_password(old_password, user.password_hash):
            raise ClientError(WRONG_PASSWORD)

        password_hash = await hash_password(new_password)

        updated = await self.users.update_password(user_id, password_hash)
        if updated is None:
            raise ServerError(SERVER_FAULT, RuntimeError(f"user {user_id} vanished during password update"))
        logger.info("password_updated", user_id=user_id)

    async def activate(self, activation_id: str) -> UserDocument:
        """Mark the user holding an activation ID as activated. Each ID works once."""
        user = await self.users.activate(activation_id)
        document_should_exist(user, ACTIVATION_NOT_FOUND)
        logger.info("account_activated", user_id=user.id)
        return user

    async def delete(self, token: str) -> None:
        """Soft delete the caller's account and end all of its sessions."""
        user_id = await self.session_manager.resolve(token)
        _, deleted = await asyncio.gather(
            self.session_manager.destroy_all(user_id),
            self.users.mark_deleted(user_id),
        )
        document_should_exist(deleted, USER_MISSING)
        logger.info("account_deleted", user_id=user_id)
