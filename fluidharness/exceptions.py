"""FluidSDK harness exception classes."""


class HarnessError(Exception):
    """Base exception for all harness errors."""

    def __init__(self, code: str, message: str) -> None:
        self.code = code
        self.message = message
        super().__init__(f"[{code}] {message}")


class ConfigurationError(HarnessError):
    """Raised when harness configuration is invalid or missing."""

    def __init__(self, message: str) -> None:
        super().__init__("CONFIGURATION_ERROR", message)


class SelfFeedbackError(ConfigurationError):
    """Raised when the feedback reviewer is the same identity as the agent owner."""

    def __init__(self, address: str) -> None:
        super().__init__(
            f"Self-feedback not allowed: reviewer {address} is also the agent owner. "
            "Set FEEDBACK_PRIVATE_KEY to a different wallet"
        )
        self.address = address


class ConnectivityError(HarnessError):
    """Raised when an RPC or HTTP endpoint cannot be reached."""

    def __init__(self, message: str) -> None:
        super().__init__("CONNECTION_ERROR", message)


class RpcError(HarnessError):
    """Raised on JSON-RPC error objects or HTTP error statuses."""

    def __init__(self, code: str, message: str, status_code: int | None = None) -> None:
        super().__init__(code, message)
        self.status_code = status_code


class InsufficientBalanceError(HarnessError):
    """Raised when a signer cannot cover transaction fees."""

    def __init__(self, address: str, balance: int, minimum: int) -> None:
        super().__init__(
            "INSUFFICIENT_BALANCE",
            f"Wallet {address} has {balance} wei, at least {minimum} wei required",
        )
        self.address = address
        self.balance = balance
        self.minimum = minimum


class RegistrationError(HarnessError):
    """Raised when on-chain registration does not yield an agent id."""

    def __init__(self, message: str) -> None:
        super().__init__("REGISTRATION_ERROR", message)


class ValidationError(HarnessError):
    """Raised on malformed identifiers or rejected feedback values."""

    def __init__(self, message: str) -> None:
        super().__init__("VALIDATION_ERROR", message)


class StepFailedError(HarnessError):
    """Raised when a lifecycle step fails fatally."""

    def __init__(self, step: str, cause: BaseException) -> None:
        super().__init__("STEP_FAILED", f"{step}: {cause}")
        self.step = step
        self.cause = cause
