"""
Program Activator
Runs the estimate -> bump -> build/sign -> submit pipeline exactly once
"""

from dataclasses import dataclass
from typing import Dict, Optional
from web3 import Web3
from loguru import logger

from blockchain.chain_client import ChainClient
from blockchain.transaction_builder import TransactionBuilder
from utils.errors import ArgumentError, RpcError
from utils.fee_calculator import compute_fee

from .signer import Signer


@dataclass(frozen=True)
class ActivationRequest:
    """Program to activate and the safety margin on its data fee"""

    program_address: str
    bump_fee_percent: int = 0

    @classmethod
    def from_args(cls, address: str, bump_fee_percent: Optional[int] = None) -> 'ActivationRequest':
        """
        Validate raw operator input

        Args:
            address: Program address as hex
            bump_fee_percent: Safety margin in percent (None means 0)

        Returns:
            ActivationRequest with a checksummed address
        """
        if not address or not Web3.is_address(address):
            raise ArgumentError(f"invalid program address: {address!r}")

        bump = 0 if bump_fee_percent is None else bump_fee_percent
        if isinstance(bump, bool) or not isinstance(bump, int):
            raise ArgumentError(f"bump fee percent must be an integer, got {bump!r}")
        if bump < 0:
            raise ArgumentError(f"bump fee percent must be non-negative, got {bump}")

        return cls(Web3.to_checksum_address(address), bump)


@dataclass(frozen=True)
class SignedActivation:
    """A signed activation transaction, alive only until it is submitted"""

    to: str
    value: int
    nonce: int
    chain_id: int
    raw_transaction: bytes
    tx_hash: str


@dataclass(frozen=True)
class ActivationResult:
    """What a successful run reports back to the operator"""

    tx_hash: str
    estimated_fee: int
    data_fee: int
    receipt: Optional[Dict] = None


class ProgramActivator:
    """
    Activates one Stylus program per run

    Any stage failure aborts the remaining stages. Nothing is broadcast
    before the final submit, so there is nothing to roll back.
    """

    def __init__(self, chain_client: ChainClient, private_key: str, wait_for_receipt: bool = True):
        """
        Initialize Program Activator

        The key is validated here, so a malformed key fails before any RPC call.

        Args:
            chain_client: Client for the target node
            private_key: Sender's private key as hex
            wait_for_receipt: Block until the transaction is mined
        """
        self.signer = Signer(private_key)
        self.chain_client = chain_client
        self.tx_builder = TransactionBuilder(chain_client, self.signer.address)
        self.wait_for_receipt = wait_for_receipt

    def build_and_sign(self, program_address: str, data_fee: int, chain_id: int) -> SignedActivation:
        """
        Build and sign the activation transaction

        Args:
            program_address: Program to activate
            data_fee: Bumped data fee in wei
            chain_id: Chain id reported by the node

        Returns:
            SignedActivation
        """
        tx = self.tx_builder.build_activation_tx(program_address, data_fee, chain_id)
        signed = self.signer.sign_transaction(tx)

        return SignedActivation(
            to=tx['to'],
            value=tx['value'],
            nonce=tx['nonce'],
            chain_id=chain_id,
            raw_transaction=bytes(signed.raw_transaction),
            tx_hash=Web3.to_hex(signed.hash)
        )

    def run(self, request: ActivationRequest) -> ActivationResult:
        """
        Activate a program

        Args:
            request: Validated activation request

        Returns:
            ActivationResult with the hash returned by the node
        """
        program = request.program_address

        chain_id = self.chain_client.get_chain_id()
        logger.info(f"Connected to chain {chain_id}")

        estimated_fee = self.chain_client.estimate_activation_fee(program)
        data_fee = compute_fee(estimated_fee, request.bump_fee_percent)

        signed = self.build_and_sign(program, data_fee, chain_id)
        logger.info(f"Submitting activation transaction {signed.tx_hash}")
        tx_hash = self.chain_client.submit_transaction(signed.raw_transaction)

        if tx_hash.lower() != signed.tx_hash.lower():
            logger.warning(f"Node returned hash {tx_hash}, locally signed transaction hashes to {signed.tx_hash}")

        receipt = None
        if self.wait_for_receipt:
            receipt = self.chain_client.wait_for_receipt(tx_hash)

            if not receipt or receipt.get('status') != 1:
                raise RpcError(f"failed to activate program {program} with tx {tx_hash}")

            logger.success(f"Successfully activated program {program} with tx {tx_hash}")
        else:
            logger.info(f"Transaction {tx_hash} accepted by the node; not waiting for the receipt")

        return ActivationResult(
            tx_hash=tx_hash,
            estimated_fee=estimated_fee,
            data_fee=data_fee,
            receipt=receipt
        )


def activate_program(
    endpoint: str,
    private_key: str,
    request: ActivationRequest,
    wait_for_receipt: bool = True
) -> ActivationResult:
    """
    Activate a program against a node URL

    Args:
        endpoint: Node RPC URL
        private_key: Sender's private key as hex
        request: Validated activation request
        wait_for_receipt: Block until the transaction is mined

    Returns:
        ActivationResult
    """
    activator = ProgramActivator(ChainClient(endpoint), private_key, wait_for_receipt)
    return activator.run(request)
