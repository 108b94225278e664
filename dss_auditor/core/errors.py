class AuditorError(Exception):
    """Base class for failures surfaced by the auditor's collaborators."""


class ConfigError(AuditorError):
    pass


class PolicyLoadError(AuditorError):
    pass


class ZendeskError(AuditorError):
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class TicketNotFoundError(ZendeskError):
    pass


class SheetsWriteError(AuditorError):
    pass


class AnalyzerError(AuditorError):
    pass
