"""Exception types shared across radclean.

Finding values never raise; these cover lookups that cannot be satisfied
(unknown organ module, unknown field path) and the clipboard boundary.
"""

from typing import Any


class RadcleanError(Exception):
    """Base exception for radclean."""

    def __init__(self, message: str, code: str = "UNKNOWN_ERROR", details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.code, "message": self.message, "details": self.details}


class UnknownModuleError(RadcleanError):
    def __init__(self, module_id: str, available: list[str] | None = None):
        super().__init__(
            f"Unknown organ module '{module_id}'",
            code="UNKNOWN_MODULE",
            details={"module_id": module_id, "available": available or []},
        )
        self.module_id = module_id


class UnknownFieldError(RadcleanError):
    def __init__(self, path: str, state_name: str = "unknown"):
        super().__init__(
            f"Unknown field '{path}' on {state_name}",
            code="UNKNOWN_FIELD",
            details={"path": path, "state": state_name},
        )
        self.path = path


class ClipboardUnavailableError(RadcleanError):
    def __init__(self, message: str = "No clipboard command available"):
        super().__init__(message, code="CLIPBOARD_UNAVAILABLE")
