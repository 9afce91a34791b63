class MemberDashboardError(Exception):
    """Base class for member dashboard configuration errors."""

    pass


class UnknownPresetError(MemberDashboardError, ValueError):
    """Raised when a preset name is not one of minimal / standard / full."""

    pass


class SessionNotInitialized(MemberDashboardError):
    """Raised when a configurator session is used before a draft exists."""

    pass


class ProgramTypeNotAllowed(MemberDashboardError):
    """Raised when a template does not support the chosen program type."""

    pass


class PublishError(MemberDashboardError):
    """Exception raised when the publish endpoint rejects or fails a publish."""

    def __init__(self, reason: str, status_code: int | None = None):
        super().__init__(reason)
        self.reason = reason
        self.status_code = status_code
