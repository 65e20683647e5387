"""
Transaction Builder
Constructs the ArbWasm activateProgram transaction
"""

from typing import Dict
from web3 import Web3
from eth_abi import encode
from loguru import logger

from utils.constants import (
    ACTIVATE_PROGRAM_SIGNATURE,
    ARB_WASM_ADDRESS,
    GAS_LIMIT_BUFFER_PERCENT,
)
from utils.fee_calculator import add_gas_buffer


def encode_activate_program(program_address: str) -> str:
    """
    Encode an activateProgram(address) call

    Args:
        program_address: Program to activate

    Returns:
        0x-prefixed call data
    """
    function_sig = Web3.keccak(text=ACTIVATE_PROGRAM_SIGNATURE)[:4]
    params = encode(['address'], [Web3.to_checksum_address(program_address)])

    return Web3.to_hex(bytes(function_sig) + params)


class TransactionBuilder:
    """
    Builds the EIP-1559 activation transaction for one sender
    """

    def __init__(self, chain_client, sender_address: str):
        """
        Initialize Transaction Builder

        Args:
            chain_client: ChainClient used for nonce, gas and fee lookups
            sender_address: Address that will sign the transaction
        """
        self.chain_client = chain_client
        self.sender_address = Web3.to_checksum_address(sender_address)

    def build_activation_tx(self, program_address: str, data_fee: int, chain_id: int) -> Dict:
        """
        Build transaction for program activation

        Args:
            program_address: Program to activate
            data_fee: Value to attach, in wei
            chain_id: Chain the transaction is valid on

        Returns:
            Unsigned transaction dict ready for signing
        """
        tx = {
            'from': self.sender_address,
            'to': ARB_WASM_ADDRESS,
            'value': data_fee,
            'data': encode_activate_program(program_address),
            'chainId': chain_id
        }

        gas_estimate = self.chain_client.estimate_gas(dict(tx))
        gas_limit = add_gas_buffer(gas_estimate, GAS_LIMIT_BUFFER_PERCENT)

        nonce = self.chain_client.get_transaction_count(self.sender_address)
        fees = self.chain_client.get_eip1559_fees()

        tx.update({
            'type': 2,
            'nonce': nonce,
            'gas': gas_limit,
            'maxFeePerGas': fees['maxFeePerGas'],
            'maxPriorityFeePerGas': fees['maxPriorityFeePerGas']
        })
        # Signer derives the sender from the key
        del tx['from']

        logger.debug(f"Gas limit: {gas_estimate} -> {gas_limit} (buffered)")
        logger.info(f"Built activation transaction with nonce {nonce} and value {data_fee} wei")

        return tx
