"""
Tests for the feedback service.
"""

import pytest

from core.errors import ServerError, SessionNotFoundError
from services.session_service import token_for


@pytest.fixture
async def alice(account_manager):
    return await account_manager.create("alice", "alice@example.com", "secret1")


@pytest.mark.unit
class TestFeedback:
    """Test giving feedback."""

    async def test_feedback_is_mailed_and_stored(
        self, feedback_service, feedback_repo, mock_email_service, alice
    ) -> None:
        await feedback_service.give(token_for(alice.session), "Nice site <3")

        expected = "Username: alice\nEmail: alice@example.com\n\nNice site &lt;3"
        mock_email_service.send_feedback_email.assert_awaited_once_with(
            username="alice", reply_to="alice@example.com", body=expected
        )
        assert [f.message for f in feedback_repo.feedback] == [expected]
        assert feedback_repo.feedback[0].author == alice.user.id

    async def test_requires_session(self, feedback_service, feedback_repo) -> None:
        with pytest.raises(SessionNotFoundError):
            await feedback_service.give("bogus", "Nice site")
        assert feedback_repo.feedback == []

    async def test_refused_without_email(self, feedback_service, mock_email_service, alice) -> None:
        mock_email_service.is_available = False

        with pytest.raises(ServerError, match="Internal server error."):
            await feedback_service.give(token_for(alice.session), "Nice site")
        mock_email_service.send_feedback_email.assert_not_awaited()

    async def test_send_failure(self, feedback_service, mock_email_service, alice) -> None:
        mock_email_service.send_feedback_email.return_value = False

        with pytest.raises(ServerError, match="Feedback sending failed."):
            await feedback_service.give(token_for(alice.session), "Nice site")
