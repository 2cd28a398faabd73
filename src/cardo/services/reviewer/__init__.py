"""Reviewer gateway services."""

from .gateway import RequestPage, ReviewerGateway, ReviewerScope

__all__ = ["ReviewerGateway", "ReviewerScope", "RequestPage"]
