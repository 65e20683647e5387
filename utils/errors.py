"""
Activation Errors
Every failure of a run is one of these; the CLI turns them into an exit code
"""


class ActivationError(Exception):
    """Base class for all activation failures"""

    kind = "activation"
    exit_code = 1

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class ArgumentError(ActivationError):
    """Missing or malformed command-line input"""

    kind = "argument"
    exit_code = 2


class RpcError(ActivationError):
    """
    Node communication failure or node-side rejection

    Carries the node's message verbatim and, for reverts, the raw revert data
    """

    kind = "rpc"

    def __init__(self, message: str, data: bytes = b""):
        super().__init__(message)
        self.data = data


class SigningError(ActivationError):
    """Invalid private key material"""

    kind = "signing"
