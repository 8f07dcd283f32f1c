"""
Typed failures for the scan pipeline.
HTTP mapping lives in app.py: validation -> 400, not found -> 404, analysis failed -> 502.
"""


class ScanError(Exception):
    """Base class for every failure the scan pipeline reports."""


class ScanValidationError(ScanError):
    """Input rejected before evaluation starts."""


class NotFoundError(ScanError):
    pass


class UserNotFoundError(NotFoundError):
    def __init__(self, user_id: str):
        super().__init__(f"User not found: {user_id}")
        self.user_id = user_id


class ScanNotFoundError(NotFoundError):
    def __init__(self, scan_id: str):
        super().__init__(f"Scan not found: {scan_id}")
        self.scan_id = scan_id


class StorageCorruptedError(ScanError):
    """A store file exists but cannot be decoded; writes refuse to replace it."""


class AnalysisFailedError(ScanError):
    """Evaluation could not produce a Result. Nothing is persisted."""


class GeneratorUnavailableError(AnalysisFailedError):
    """Text generator unreachable, timed out, or returned an unusable envelope."""


class MalformedResponseError(AnalysisFailedError):
    """No JSON object could be located in the generator output."""


class ResponseParseError(AnalysisFailedError):
    """A JSON candidate was located but did not parse."""

    def __init__(self, message: str, raw_text: str = ""):
        super().__init__(message)
        self.raw_text = raw_text
