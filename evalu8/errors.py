"""Errors raised by the lifecycle layer and turned into JSON responses by the app."""


class Evalu8Error(Exception):
    status_code = 500
    message = "Internal server error"

    def __init__(self, message=None):
        super().__init__(message or self.message)
        if message:
            self.message = message


class InvalidRequest(Evalu8Error):
    status_code = 400
    message = "Invalid request"


class InterviewClosed(InvalidRequest):
    message = "Interview already submitted"


class Forbidden(Evalu8Error):
    status_code = 403
    message = "Forbidden"


class NotFound(Evalu8Error):
    status_code = 404
    message = "Not found"


class TurnInProgress(Evalu8Error):
    status_code = 409
    message = "Another message for this interview is still being processed"
