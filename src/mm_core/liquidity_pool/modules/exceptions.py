"""
Liquidity pool errors.

Raised to the caller unchanged; the pool never retries.
"""


class LiquidityPoolError(ValueError):
    """Base class for all pool failures"""


class AlreadyInitializedError(LiquidityPoolError):
    """Pool already holds LP supply"""


class InvalidAmountError(LiquidityPoolError):
    """Non-positive token amount"""


class InitialLiquidityTooLowError(LiquidityPoolError):
    """sqrt(a * b) below the minimum liquidity floor"""


class SlippageExceededError(LiquidityPoolError):
    """Swap output below the caller's minimum"""

    def __init__(self, min_amount_out: float, amount_out: float):
        self.min_amount_out = min_amount_out
        self.amount_out = amount_out
        super().__init__(f"Slippage exceeded: expected {min_amount_out}, got {amount_out}")


class InvalidLpAmountError(LiquidityPoolError):
    """LP amount non-positive or above the outstanding supply"""


class InsufficientLiquidityError(LiquidityPoolError):
    """Requested output cannot be served by the reserves"""


class InvalidFeeError(LiquidityPoolError):
    """Fee outside [0, 1)"""
