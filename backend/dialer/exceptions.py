"""
Error taxonomy for the distribution engine.

Services raise these; API views turn them into {"detail", "code"} responses
with the mapped HTTP status. Nothing here is retried internally; a
Conflict means the caller lost a race and may retry the whole operation.
"""


class DialerError(Exception):
    code = "error"
    status_code = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFound(DialerError):
    code = "not_found"
    status_code = 404


class Conflict(DialerError):
    code = "conflict"
    status_code = 409


class AgentUnavailable(Conflict):
    code = "agent_unavailable"


class LeadUnavailable(Conflict):
    code = "lead_unavailable"


class Forbidden(DialerError):
    code = "forbidden"
    status_code = 403


class AlreadyClosed(DialerError):
    code = "already_closed"
    status_code = 409


class InvalidTransition(DialerError):
    code = "invalid_transition"
    status_code = 400
