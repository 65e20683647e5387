"""
Utilities Package
Fee arithmetic, chain constants and the error taxonomy
"""

from .errors import ActivationError, ArgumentError, RpcError, SigningError
from .fee_calculator import compute_fee, add_gas_buffer

__all__ = [
    'ActivationError',
    'ArgumentError',
    'RpcError',
    'SigningError',
    'compute_fee',
    'add_gas_buffer'
]
