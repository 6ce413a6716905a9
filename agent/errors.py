# agent/errors.py
"""
Failure kinds raised by the operations in agent/flows.py.

All three are caught by agent.actions.handle_action and turned into a
failure result; nothing here should reach the UI as an exception.
"""


class FlowError(Exception):
    kind = "FLOW_ERROR"


class InvalidInput(FlowError):
    """Input did not match the operation's declared shape. Raised before any service call."""
    kind = "INVALID_INPUT"


class ExternalCallFailure(FlowError):
    """The generative service was unreachable, timed out or answered with an error."""
    kind = "EXTERNAL_CALL_FAILURE"


class OutputSchemaMismatch(FlowError):
    """The reply could not be parsed into the declared output shape.

    The raw reply is not something a user can act on, so the message is fixed
    and the parser detail is kept on `.detail` for the logs.
    """
    kind = "OUTPUT_SCHEMA_MISMATCH"
    message = "The AI service returned a response in an unexpected format. Please try again."

    def __init__(self, detail: str = ""):
        super().__init__(self.message)
        self.detail = detail
