"""
Stylus Program Activator
Fee estimation, signing and submission of one activation transaction
"""

__version__ = "0.1.0"

from .program_activator import (
    ActivationRequest,
    ActivationResult,
    ProgramActivator,
    SignedActivation,
    activate_program,
)
from .signer import Signer

__all__ = [
    'ActivationRequest',
    'ActivationResult',
    'ProgramActivator',
    'SignedActivation',
    'Signer',
    'activate_program',
    '__version__'
]
