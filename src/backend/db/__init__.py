"""Database module."""

from db.cosmos_session import close_cosmos, init_cosmos

__all__ = ["init_cosmos", "close_cosmos"]
