class StringAnalyzerError(Exception):
    """Base error raised by the analyzer core and stores"""

    status_code = 400
    default_message = "Invalid request"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(StringAnalyzerError):
    """Malformed or missing client input"""

    status_code = 400
    default_message = "Invalid request body or query parameters"


class EmptyInputError(ValidationError):
    default_message = "String value must not be empty"


class NotFoundError(StringAnalyzerError):
    status_code = 404
    default_message = "String does not exist in the system"


class ConflictError(StringAnalyzerError):
    status_code = 409
    default_message = "String already exists in the system"
