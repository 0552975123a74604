"""
Error taxonomy for the agent.

None of these ever escape the process: each is caught and logged where it
happens so a failed sample never turns into a failed invocation.
"""


class StatAgentError(Exception):
    """Base class for all agent errors"""


class ReadError(StatAgentError):
    """An OS metric could not be queried"""


class SerializationError(StatAgentError):
    """A sample could not be encoded"""


class TransportError(StatAgentError):
    """The report never reached the destination"""


class UnexpectedStatus(StatAgentError):
    """The destination answered with a non-200 status"""

    def __init__(self, status_code: int):
        super().__init__(f"Status code: {status_code}")
        self.status_code = status_code


class ConfigLoadError(StatAgentError):
    """An env file or config file is missing or malformed"""
