"""Exception hierarchy shared by the sync gateway and attendance operations."""


class SyncError(Exception):
    """Base class for failures talking to the remote spreadsheet endpoint."""


class EndpointNotConfigured(SyncError):
    def __init__(self, message: str = "No spreadsheet endpoint URL is configured."):
        super().__init__(message)


class RemoteUnreachable(SyncError):
    """The endpoint could not be reached at all (DNS, refused, TLS, timeout)."""


class RemoteHTTPError(SyncError):
    def __init__(self, status_code: int):
        self.status_code = status_code
        super().__init__(f"Remote endpoint answered with HTTP {status_code}.")


class RemotePermissionError(SyncError):
    """The endpoint answered with HTML (usually a sign-in page) instead of JSON."""


class RemoteApplicationError(SyncError):
    """The endpoint answered with ``{"status": "error", "message": ...}``."""


class AttendanceError(Exception):
    """Base class for rejected attendance or member operations."""


class UnknownMemberError(AttendanceError):
    def __init__(self, member_id: str):
        self.member_id = member_id
        super().__init__(f"Unknown member: {member_id}")


class InvalidAttendanceError(AttendanceError):
    pass
