"""
Program Activator Tests
End-to-end pipeline runs against a mocked chain client
"""

import pytest
from unittest.mock import Mock, patch
from eth_account import Account
from loguru import logger
from web3 import Web3

from activator.program_activator import (
    ActivationRequest,
    ProgramActivator,
    activate_program,
)
from blockchain.chain_client import ChainClient
from utils.constants import ARB_WASM_ADDRESS
from utils.errors import ArgumentError, RpcError, SigningError

TEST_PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
TEST_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
PROGRAM_ADDRESS = "0x" + "11" * 20
TX_HASH = "0x" + "ab" * 32


@pytest.fixture
def chain_client():
    """Mock chain client for a node that accepts everything"""
    client = Mock(spec=ChainClient)
    client.get_chain_id.return_value = 42161
    client.estimate_activation_fee.return_value = 1000
    client.estimate_gas.return_value = 100_000
    client.get_transaction_count.return_value = 7
    client.get_eip1559_fees.return_value = {
        'maxFeePerGas': 200_000_000,
        'maxPriorityFeePerGas': 0
    }
    client.submit_transaction.return_value = TX_HASH
    client.wait_for_receipt.return_value = {'status': 1, 'transactionHash': TX_HASH}
    return client


class TestActivationRequest:
    """Test operator input validation"""

    def test_defaults_bump_to_zero(self):
        request = ActivationRequest.from_args(PROGRAM_ADDRESS)

        assert request.bump_fee_percent == 0

    def test_checksums_address(self):
        request = ActivationRequest.from_args("0x" + "ab" * 20, 5)

        assert request.program_address == Web3.to_checksum_address("0x" + "ab" * 20)

    def test_rejects_negative_bump(self):
        with pytest.raises(ArgumentError, match="non-negative"):
            ActivationRequest.from_args(PROGRAM_ADDRESS, -1)

    @pytest.mark.parametrize("address", ["", "0x1234", "not-an-address", "0x" + "gg" * 20])
    def test_rejects_bad_address(self, address):
        with pytest.raises(ArgumentError, match="invalid program address"):
            ActivationRequest.from_args(address, 0)

    def test_request_is_immutable(self):
        request = ActivationRequest.from_args(PROGRAM_ADDRESS, 10)

        with pytest.raises(AttributeError):
            request.bump_fee_percent = 20


class TestProgramActivator:
    """Test the four-stage pipeline"""

    def test_bumped_fee_is_submitted(self, chain_client):
        """Base fee 1000, bump 20 -> 1200; hash passed through unmodified"""
        activator = ProgramActivator(chain_client, TEST_PRIVATE_KEY)

        with patch.object(
            activator.tx_builder,
            'build_activation_tx',
            wraps=activator.tx_builder.build_activation_tx
        ) as build:
            result = activator.run(ActivationRequest.from_args(PROGRAM_ADDRESS, 20))

        build.assert_called_once_with(PROGRAM_ADDRESS, 1200, 42161)
        chain_client.submit_transaction.assert_called_once()
        assert result.tx_hash == TX_HASH
        assert result.estimated_fee == 1000
        assert result.data_fee == 1200

    def test_zero_bump_keeps_estimate(self, chain_client):
        """Base fee 500, bump 0 -> 500; submission proceeds"""
        chain_client.estimate_activation_fee.return_value = 500
        activator = ProgramActivator(chain_client, TEST_PRIVATE_KEY)

        result = activator.run(ActivationRequest.from_args(PROGRAM_ADDRESS, 0))

        assert result.data_fee == 500
        assert result.tx_hash == TX_HASH
        chain_client.submit_transaction.assert_called_once()

    def test_submitted_transaction_is_signed_by_sender(self, chain_client):
        activator = ProgramActivator(chain_client, TEST_PRIVATE_KEY)

        activator.run(ActivationRequest.from_args(PROGRAM_ADDRESS, 20))

        raw_transaction = chain_client.submit_transaction.call_args[0][0]
        assert Account.recover_transaction(raw_transaction) == TEST_ADDRESS

    def test_already_activated_aborts_before_submit(self, chain_client):
        chain_client.estimate_activation_fee.side_effect = RpcError(
            "failed to check activation via spoofed eth_call: execution reverted: ProgramUpToDate"
        )
        activator = ProgramActivator(chain_client, TEST_PRIVATE_KEY)

        with pytest.raises(RpcError, match="ProgramUpToDate"):
            activator.run(ActivationRequest.from_args(PROGRAM_ADDRESS, 20))

        chain_client.get_transaction_count.assert_not_called()
        chain_client.submit_transaction.assert_not_called()

    def test_malformed_key_fails_before_any_rpc(self, chain_client):
        with pytest.raises(SigningError):
            ProgramActivator(chain_client, "0x1234")

        assert chain_client.method_calls == []

    def test_failed_receipt(self, chain_client):
        chain_client.wait_for_receipt.return_value = {'status': 0}
        activator = ProgramActivator(chain_client, TEST_PRIVATE_KEY)

        with pytest.raises(RpcError, match="failed to activate program"):
            activator.run(ActivationRequest.from_args(PROGRAM_ADDRESS, 0))

    def test_no_wait_skips_receipt(self, chain_client):
        activator = ProgramActivator(chain_client, TEST_PRIVATE_KEY, wait_for_receipt=False)

        result = activator.run(ActivationRequest.from_args(PROGRAM_ADDRESS, 0))

        chain_client.wait_for_receipt.assert_not_called()
        assert result.receipt is None
        assert result.tx_hash == TX_HASH

    def test_node_hash_mismatch_is_logged(self, chain_client):
        """Node hash is passed through even when it differs from the local one"""
        messages = []
        handler_id = logger.add(messages.append, level="WARNING", format="{message}")
        activator = ProgramActivator(chain_client, TEST_PRIVATE_KEY)

        try:
            result = activator.run(ActivationRequest.from_args(PROGRAM_ADDRESS, 0))
        finally:
            logger.remove(handler_id)

        assert result.tx_hash == TX_HASH
        assert any("locally signed transaction hashes to" in message for message in messages)

    def test_matching_node_hash_logs_no_warning(self, chain_client):
        chain_client.submit_transaction.side_effect = lambda raw: Web3.to_hex(Web3.keccak(raw))
        messages = []
        handler_id = logger.add(messages.append, level="WARNING", format="{message}")
        activator = ProgramActivator(chain_client, TEST_PRIVATE_KEY, wait_for_receipt=False)

        try:
            result = activator.run(ActivationRequest.from_args(PROGRAM_ADDRESS, 0))
        finally:
            logger.remove(handler_id)

        raw_transaction = chain_client.submit_transaction.call_args[0][0]
        assert result.tx_hash == Web3.to_hex(Web3.keccak(raw_transaction))
        assert messages == []


class TestBuildAndSign:
    """Test the signed activation record"""

    def test_signed_activation_fields(self, chain_client):
        activator = ProgramActivator(chain_client, TEST_PRIVATE_KEY)

        signed = activator.build_and_sign(PROGRAM_ADDRESS, 1200, 42161)

        assert signed.to == ARB_WASM_ADDRESS
        assert signed.value == 1200
        assert signed.nonce == 7
        assert signed.chain_id == 42161
        assert signed.tx_hash.startswith("0x")

    def test_signing_twice_verifies(self, chain_client):
        """Same payload and key give signatures that both recover the sender"""
        activator = ProgramActivator(chain_client, TEST_PRIVATE_KEY)

        first = activator.build_and_sign(PROGRAM_ADDRESS, 1200, 42161)
        second = activator.build_and_sign(PROGRAM_ADDRESS, 1200, 42161)

        assert Account.recover_transaction(first.raw_transaction) == TEST_ADDRESS
        assert Account.recover_transaction(second.raw_transaction) == TEST_ADDRESS
        assert first.raw_transaction == second.raw_transaction


class TestActivateProgram:
    """Test the endpoint-level helper"""

    def test_builds_client_for_endpoint(self, chain_client):
        with patch('activator.program_activator.ChainClient', return_value=chain_client) as client_cls:
            result = activate_program(
                "http://localhost:8547",
                TEST_PRIVATE_KEY,
                ActivationRequest.from_args(PROGRAM_ADDRESS, 20)
            )

        client_cls.assert_called_once_with("http://localhost:8547")
        assert result.tx_hash == TX_HASH
