"""Errors raised by the local invoke emulator"""
from werkzeug.exceptions import BadRequest


class ManifestError(Exception):
    """The service manifest could not be read or is structurally invalid"""


class HandlerResolutionError(Exception):
    """A function's handler could not be turned into a callable"""

    def __init__(self, function_name, handler, reason):
        self.function_name = function_name
        self.handler = handler
        self.reason = reason
        super().__init__(f"{handler}: {reason}")


class MalformedBodyError(BadRequest):
    """A request body looked like a JSON object but failed to parse"""

    description = "Request body starts with '{' but is not valid JSON"


class InvocationTimeout(Exception):
    """The invocation did not complete within the configured wait"""

    def __init__(self, function_name, seconds):
        self.function_name = function_name
        self.seconds = seconds
        super().__init__(f"{function_name} did not complete within {seconds}s")
