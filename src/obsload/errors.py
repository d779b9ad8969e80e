from __future__ import annotations


class ObsloadError(Exception):
    """Base class for load generator errors."""


class StartupPreconditionError(ObsloadError):
    """A run could not be started. No worker was launched."""


class InvalidConfigError(StartupPreconditionError):
    pass


class HealthCheckError(StartupPreconditionError):
    def __init__(self, url: str, status_code: int, detail: str | None = None) -> None:
        self.url = url
        self.status_code = status_code
        self.detail = detail
        if detail:
            msg = f"Health check {url} failed: {detail}"
        else:
            msg = f"Health check {url} returned status {status_code}"
        super().__init__(msg)
