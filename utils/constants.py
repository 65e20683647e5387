"""
Chain Constants
ArbOS precompile addresses and activation call parameters
"""

# ArbWasm precompile (Stylus program activation)
ARB_WASM_ADDRESS = "0x0000000000000000000000000000000000000071"

ACTIVATE_PROGRAM_SIGNATURE = "activateProgram(address)"
ACTIVATE_PROGRAM_RETURN_TYPES = ['uint16', 'uint256']

# Sender used by eth_call when no 'from' is given
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# Value attached to the simulated activation call (1 ether in wei)
ESTIMATE_CALL_VALUE_WEI = 10**18

# Balance given to the simulated sender via state override
SPOOFED_BALANCE_WEI = 2**256 - 1

# 20% buffer on eth_estimateGas
GAS_LIMIT_BUFFER_PERCENT = 20

# Receipt polling interval
RECEIPT_POLL_LATENCY_SECONDS = 0.25
