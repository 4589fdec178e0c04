"""File summary API middleware package."""

from filesummary.api.middleware.request_id import RequestIdLogFilter, RequestIdMiddleware

__all__ = ["RequestIdLogFilter", "RequestIdMiddleware"]
