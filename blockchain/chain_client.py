"""
Chain Client
Thin wrapper around a single JSON-RPC endpoint of an Arbitrum (Stylus) node
"""

from typing import Dict, Optional
from eth_abi import decode
from eth_abi.exceptions import DecodingError
from hexbytes import HexBytes
from requests.exceptions import RequestException
from web3 import Web3
from web3.exceptions import TimeExhausted, Web3Exception
from loguru import logger

from blockchain.transaction_builder import encode_activate_program
from utils.constants import (
    ACTIVATE_PROGRAM_RETURN_TYPES,
    ARB_WASM_ADDRESS,
    ESTIMATE_CALL_VALUE_WEI,
    RECEIPT_POLL_LATENCY_SECONDS,
    SPOOFED_BALANCE_WEI,
    ZERO_ADDRESS,
)
from utils.errors import RpcError

# Everything web3 and its HTTP transport raise for a failed request
NODE_ERRORS = (Web3Exception, ValueError, RequestException)


def _wrap_node_error(exc: Exception, context: str) -> RpcError:
    """Turn a web3/requests exception into an RpcError keeping the node's message"""
    data = getattr(exc, 'data', None)
    rpc_response = getattr(exc, 'rpc_response', None)

    if data is None and isinstance(rpc_response, dict):
        data = (rpc_response.get('error') or {}).get('data')

    if isinstance(data, str) and data.startswith('0x'):
        data = bytes(HexBytes(data))
    elif not isinstance(data, (bytes, bytearray)):
        data = b""

    message = getattr(exc, 'message', None)
    if not isinstance(message, str) or not message:
        message = str(exc)

    return RpcError(f"{context}: {message}", data=bytes(data))


class ChainClient:
    """
    Talks to one node over HTTP(S)

    No retries and no fallback endpoints: every failure surfaces as RpcError
    """

    def __init__(self, endpoint: str, w3: Optional[Web3] = None):
        """
        Initialize Chain Client

        Args:
            endpoint: Node RPC URL
            w3: Pre-built Web3 instance (tests inject a mock)
        """
        self.endpoint = endpoint
        self.w3 = w3 if w3 is not None else Web3(Web3.HTTPProvider(endpoint))

        logger.debug(f"Chain client created for {endpoint}")

    def get_chain_id(self) -> int:
        """Get the chain id reported by the node"""
        try:
            return int(self.w3.eth.chain_id)
        except NODE_ERRORS as e:
            raise _wrap_node_error(e, "failed to fetch chain id") from e

    def get_transaction_count(self, address: str) -> int:
        """
        Get next nonce for an account

        Args:
            address: Sender address

        Returns:
            Transaction count including pending transactions
        """
        try:
            return int(self.w3.eth.get_transaction_count(address, 'pending'))
        except NODE_ERRORS as e:
            raise _wrap_node_error(e, f"failed to fetch nonce for {address}") from e

    def estimate_activation_fee(self, address: str) -> int:
        """
        Estimate the data fee needed to activate a program

        Simulates ArbWasm.activateProgram with eth_call from a zero address
        whose balance is spoofed, so the call can pay whatever fee ArbOS asks.

        Args:
            address: Program address

        Returns:
            Data fee in wei
        """
        try:
            code = self.w3.eth.get_code(address)
        except NODE_ERRORS as e:
            raise _wrap_node_error(e, f"failed to fetch code at {address}") from e

        if not code:
            raise RpcError(f"no program deployed at {address}")

        call = {
            'to': ARB_WASM_ADDRESS,
            'value': ESTIMATE_CALL_VALUE_WEI,
            'data': encode_activate_program(address)
        }
        state_override = {
            address: {'code': Web3.to_hex(code)},
            ZERO_ADDRESS: {'balance': hex(SPOOFED_BALANCE_WEI)}
        }

        try:
            result = self.w3.eth.call(call, 'latest', state_override)
        except NODE_ERRORS as e:
            raise _wrap_node_error(e, "failed to check activation via spoofed eth_call") from e

        try:
            version, data_fee = decode(ACTIVATE_PROGRAM_RETURN_TYPES, bytes(result))
        except DecodingError as e:
            raise RpcError(f"unexpected activateProgram return data: {Web3.to_hex(result)}") from e

        logger.info(f"Obtained estimated activation data fee {data_fee} wei (stylus version {version})")
        return data_fee

    def estimate_gas(self, tx: Dict) -> int:
        """Estimate gas for an unsigned transaction"""
        try:
            return int(self.w3.eth.estimate_gas(tx))
        except NODE_ERRORS as e:
            raise _wrap_node_error(e, "gas estimation failed") from e

    def get_eip1559_fees(self) -> Dict[str, int]:
        """
        Get EIP-1559 fee parameters

        Returns:
            Dict with maxFeePerGas and maxPriorityFeePerGas in wei
        """
        try:
            latest_block = self.w3.eth.get_block('latest')
            base_fee_wei = latest_block.get('baseFeePerGas', 0)
            priority_fee_wei = self.w3.eth.max_priority_fee
        except NODE_ERRORS as e:
            raise _wrap_node_error(e, "failed to fetch fee parameters") from e

        # Max fee = base fee * 2 + priority fee (buffer for fluctuations)
        return {
            'maxFeePerGas': int(base_fee_wei) * 2 + int(priority_fee_wei),
            'maxPriorityFeePerGas': int(priority_fee_wei)
        }

    def submit_transaction(self, raw_transaction: bytes) -> str:
        """
        Broadcast a signed transaction

        Args:
            raw_transaction: RLP-encoded signed transaction

        Returns:
            0x-prefixed transaction hash
        """
        try:
            tx_hash = self.w3.eth.send_raw_transaction(raw_transaction)
        except NODE_ERRORS as e:
            raise _wrap_node_error(e, "failed to submit transaction") from e

        tx_hash = Web3.to_hex(tx_hash)
        logger.info(f"Transaction sent: {tx_hash}")
        return tx_hash

    def wait_for_receipt(self, tx_hash: str) -> Dict:
        """
        Wait until a transaction is mined

        Uses web3's default timeout.

        Args:
            tx_hash: Transaction hash

        Returns:
            Transaction receipt
        """
        try:
            receipt = self.w3.eth.wait_for_transaction_receipt(
                tx_hash,
                poll_latency=RECEIPT_POLL_LATENCY_SECONDS
            )
        except TimeExhausted as e:
            raise RpcError(f"transaction {tx_hash} was not mined in time") from e
        except NODE_ERRORS as e:
            raise _wrap_node_error(e, f"failed to fetch receipt for {tx_hash}") from e

        logger.debug(f"Receipt: {dict(receipt)}")
        return receipt
