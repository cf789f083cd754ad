"""Errors raised by inference gateways.

The transcript store treats every gateway exception as a single
"gateway call failed" outcome; the subclasses only exist so gateways and
the CLI can report what went wrong in logs.
"""


class GatewayError(Exception):
    """Base class for inference gateway errors."""


class GatewayNotInitializedError(GatewayError):
    """The gateway was used before initialize() completed."""

    def __init__(self, backend: str):
        super().__init__(f"{backend} gateway used before initialize()")
        self.backend = backend


class GatewayConnectionError(GatewayError):
    """Network or transport failure talking to the backend."""

    def __init__(self, message: str):
        super().__init__(f"Connection error: {message}")


class GatewayResponseError(GatewayError):
    """The backend answered, but not with a usable reply."""

    def __init__(self, message: str, status_code: int | None = None):
        msg = f"Bad response: {message}"
        if status_code is not None:
            msg += f" (status: {status_code})"
        super().__init__(msg)
        self.status_code = status_code
