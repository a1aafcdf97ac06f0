"""
Agent Kit Exceptions

Error taxonomy shared by the wallet session, transaction orchestrator,
result normalizer and tool adapter.
"""


class CardanoAgentKitError(Exception):
    """Base exception for cardano-agent-kit errors"""

    pass


class ConfigurationError(CardanoAgentKitError):
    """Invalid constructor input or settings"""

    pass


class NoAddressError(CardanoAgentKitError):
    """Wallet has no usable address"""

    pass


class InvalidStakeAddressError(CardanoAgentKitError):
    """Reward address does not match the active network's stake prefix"""

    pass


class UnsupportedOperationError(CardanoAgentKitError):
    """Capability not available on the active chain provider"""

    pass


class ProviderError(CardanoAgentKitError):
    """Chain provider query failed"""

    def __init__(self, operation: str, cause: BaseException):
        self.operation = operation
        self.cause = cause
        super().__init__(f"Error {operation}: {cause}")


class TransactionError(CardanoAgentKitError):
    """
    Base exception for transaction pipeline failures

    Carries the attempted operation and the underlying cause so the message
    always names both.
    """

    phase = "transaction"

    def __init__(self, operation: str, cause: BaseException):
        self.operation = operation
        self.cause = cause
        super().__init__(f"Error {operation}: {cause}")


class BuildError(TransactionError):
    """Unsigned transaction could not be built"""

    phase = "build"


class SigningError(TransactionError):
    """Transaction could not be signed"""

    phase = "sign"


class SubmissionError(TransactionError):
    """Signed transaction was rejected or could not be submitted"""

    phase = "submit"


class ToolExecutionError(CardanoAgentKitError):
    """Agent tool invocation failed"""

    def __init__(self, tool_name: str, cause: BaseException):
        self.tool_name = tool_name
        self.cause = cause
        super().__init__(f"Failed to execute {tool_name}: {cause}")
