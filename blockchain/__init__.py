"""
Blockchain Interaction Package
Handles node RPC calls and activation transaction building
"""

from .chain_client import ChainClient
from .transaction_builder import TransactionBuilder, encode_activate_program

__all__ = ['ChainClient', 'TransactionBuilder', 'encode_activate_program']
