class MicroblogError(Exception):
    status_code = 500

    def __init__(self, message):
        super().__init__(message)
        self.message = message


#missing, malformed or duplicate field
class ValidationError(MicroblogError):
    status_code = 400


#anonymous or non-owner action
class AuthorizationError(MicroblogError):
    status_code = 403


class NotFoundError(MicroblogError):
    status_code = 404
