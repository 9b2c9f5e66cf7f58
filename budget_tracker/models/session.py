"""
Per-request session context.

The calling layer resolves who the user is (login, token, whatever it
uses) and hands the result in here. The core only ever reads user_id.
"""

from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


class SessionContext(BaseModel):
    """Resolved identity for one request or UI session."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    user_id: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Already-authenticated user identifier"
    )
    correlation_id: UUID = Field(
        default_factory=uuid4,
        description="Ties together the audit events of one user action"
    )

    def for_new_action(self) -> "SessionContext":
        """Same user, fresh correlation id."""
        return SessionContext(user_id=self.user_id)

    @classmethod
    def next_for(cls, previous: Optional["SessionContext"], user_id: str) -> "SessionContext":
        """
        Session for the next action of user_id.

        Continues previous when it belongs to the same user; a different
        or missing previous session starts a new one.
        """
        if previous is None or previous.user_id != user_id.strip():
            return cls(user_id=user_id)
        return previous.for_new_action()
