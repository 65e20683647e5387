"""
Signer
Validates the operator's private key and signs the activation transaction
"""

import re
from typing import Dict
from eth_account import Account
from eth_account.datastructures import SignedTransaction
from loguru import logger

from utils.errors import SigningError

PRIVATE_KEY_PATTERN = re.compile(r'^(0x)?[0-9a-fA-F]{64}$')


class Signer:
    """
    Holds one secp256k1 key

    The key is checked when the signer is created, before any node is contacted.
    """

    def __init__(self, private_key: str):
        """
        Initialize Signer

        Args:
            private_key: 32-byte hex key, with or without 0x prefix
        """
        private_key = (private_key or '').strip()

        if not PRIVATE_KEY_PATTERN.match(private_key):
            raise SigningError("private key must be 32 bytes encoded as 64 hex characters")

        try:
            self.account = Account.from_key(private_key)
        except ValueError as e:
            raise SigningError(f"invalid private key: {e}") from e

        self.address = self.account.address

        logger.info(f"Signer wallet: {self.address}")

    def sign_transaction(self, transaction: Dict) -> SignedTransaction:
        """
        Sign a transaction

        Signatures are deterministic (RFC 6979): the same transaction and key
        always give the same signature.

        Args:
            transaction: Unsigned transaction dict

        Returns:
            Signed transaction
        """
        try:
            return self.account.sign_transaction(transaction)
        except (TypeError, ValueError) as e:
            raise SigningError(f"failed to sign transaction: {e}") from e
