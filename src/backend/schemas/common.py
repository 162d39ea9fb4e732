"""
Response envelope shared by every endpoint.
"""

from pydantic import BaseModel


class MessageResponse(BaseModel):
    """Every response carries a status code and a human readable message."""

    code: int = 200
    message: str
