"""Domain exceptions translated into JSON error payloads at the HTTP boundary."""

from __future__ import annotations

from typing import Any, Mapping, Optional


class FreezerError(Exception):
    """Base error carrying a machine-readable code and a suggested HTTP status."""

    http_status = 400
    default_code = "bad_request"

    def __init__(
        self,
        code: Optional[str] = None,
        message: Optional[str] = None,
        details: Optional[Mapping[str, Any]] = None,
    ):
        self.code = code or self.default_code
        self.message = message or self.code.replace("_", " ")
        self.details = dict(details) if details else None
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class NotFoundError(FreezerError):
    """A referenced meal set, item, container or recipe does not exist."""

    http_status = 404
    default_code = "not_found"


class BusinessRuleError(FreezerError):
    """The request is well-formed but violates an inventory rule."""

    http_status = 422
    default_code = "unprocessable"


class NoItemsAvailableError(BusinessRuleError):
    default_code = "no_items_available"


__all__ = ["FreezerError", "NotFoundError", "BusinessRuleError", "NoItemsAvailableError"]
