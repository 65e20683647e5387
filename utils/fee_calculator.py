"""
Fee Calculator
Applies the operator's safety margin to the estimated activation data fee
"""

from loguru import logger


def compute_fee(base_estimate: int, bump_percent: int) -> int:
    """
    Bump an estimated data fee by a percentage

    Integer arithmetic only, truncating toward zero, so the result is exact
    in wei and never below the estimate.

    Args:
        base_estimate: Estimated data fee in wei
        bump_percent: Non-negative safety margin in percent

    Returns:
        Final fee in wei
    """
    final_fee = base_estimate + base_estimate * bump_percent // 100

    if bump_percent:
        logger.info(f"Bumping estimated activation data fee by {bump_percent}%: {base_estimate} -> {final_fee} wei")

    return final_fee


def add_gas_buffer(gas_estimate: int, buffer_percent: int) -> int:
    """Pad a gas estimate by a percentage (integer, rounded down)"""
    return gas_estimate + gas_estimate * buffer_percent // 100
