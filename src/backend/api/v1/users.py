"""
User account endpoints: registration, login, sessions, password and activation.
"""

from typing import Annotated

import structlog
from fastapi import APIRouter, BackgroundTasks, Depends

from api.deps import get_account_manager, get_session_manager, get_token
from schemas.common import MessageResponse
from schemas.user import (
    ActivationRequest,
    LoginResponse,
    PasswordUpdate,
    SessionResponse,
    UserAuthenticate,
    UserCreate,
)
from services.account_service import AccountManager
from services.email_service import EmailService, get_email_service
from services.session_service import SessionManager, session_ttl_ms, token_for

logger = structlog.get_logger(__name__)

router = APIRouter()


async def send_activation_email(email: EmailService, to_email: str, username: str, activation_id: str) -> None:
    """Fire-and-forget activation mail. A failure only gets logged."""
    sent = await email.send_activation_email(to_email, username, activation_id)
    if not sent:
        logger.warning("activation_email_not_sent", username=username)


@router.post("", response_model=SessionResponse)
async def create_user(
    body: UserCreate,
    background_tasks: BackgroundTasks,
    accounts: Annotated[AccountManager, Depends(get_account_manager)],
    email: Annotated[EmailService, Depends(get_email_service)],
) -> SessionResponse:
    """Register a new account and log it in."""
    account = await accounts.create(body.username, body.email, body.password)
    background_tasks.add_task(
        send_activation_email, email, account.user.email, account.user.username, account.activation_id
    )
    return SessionResponse(
        message="User successfully created.",
        token=token_for(account.session),
        ttl=session_ttl_ms(account.session),
    )


@router.delete("", response_model=MessageResponse)
async def delete_user(
    token: Annotated[str, Depends(get_token)],
    accounts: Annotated[AccountManager, Depends(get_account_manager)],
) -> MessageResponse:
    await accounts.delete(token)
    return MessageResponse(message="Your account has been deleted. Good bye!")


@router.post("/authenticate", response_model=LoginResponse)
async def authenticate_user(
    body: UserAuthenticate,
    accounts: Annotated[AccountManager, Depends(get_account_manager)],
) -> LoginResponse:
    login = await accounts.authenticate(body.usernameemail, body.password)
    return LoginResponse(
        message="You have logged in.",
        username=login.user.username,
        token=token_for(login.session),
        ttl=session_ttl_ms(login.session),
    )


@router.post("/reauthenticate", response_model=SessionResponse)
async def reauthenticate_user(
    token: Annotated[str, Depends(get_token)],
    sessions: Annotated[SessionManager, Depends(get_session_manager)],
) -> SessionResponse:
    """Exchange a live session for a fresh one."""
    session = await sessions.reauthenticate(token)
    return SessionResponse(
        message="Session successfully refreshed.",
        token=token_for(session),
        ttl=session_ttl_ms(session),
    )


@router.post("/logout", response_model=MessageResponse)
async def logout_user(
    token: Annotated[str, Depends(get_token)],
    sessions: Annotated[SessionManager, Depends(get_session_manager)],
) -> MessageResponse:
    await sessions.destroy(token)
    return MessageResponse(message="You have logged out.")


@router.put("/password", response_model=MessageResponse)
async def update_password(
    body: PasswordUpdate,
    token: Annotated[str, Depends(get_token)],
    accounts: Annotated[AccountManager, Depends(get_account_manager)],
) -> MessageResponse:
    await accounts.update_password(token, body.oldPassword, body.newPassword)
    return MessageResponse(message="Your password has been changed successfully.")


@router.post("/activate", response_model=MessageResponse)
async def activate_user(
    body: ActivationRequest,
    accounts: Annotated[AccountManager, Depends(get_account_manager)],
) -> MessageResponse:
    await accounts.activate(body.activationid)
    return MessageResponse(message="Your account is now activated.")
