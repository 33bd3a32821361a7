class ReposyncException(Exception):
    pass


class NotFoundException(ReposyncException):
    pass


class NotReadyException(ReposyncException):
    pass


class ParseServiceError(ReposyncException):
    """Transient failure talking to the dependency parsing service."""


class MalformedJobPayload(ReposyncException):
    """The parsing service answered with something that is not a job."""


class ArchiveServiceError(ReposyncException):
    pass


class HostError(ReposyncException):
    pass


class InvalidParseStateTransition(ReposyncException):
    pass


# (status_code, error_message, error_code)
EXCEPTION_MAP = {
    NotFoundException: (404, None, 9000),
    NotReadyException: (503, "Service is not ready", 9001),
    MalformedJobPayload: (422, None, 9002),
    InvalidParseStateTransition: (409, None, 9003),
    ParseServiceError: (502, "Dependency parsing service unavailable", 9004),
    HostError: (400, None, 9005),
}
