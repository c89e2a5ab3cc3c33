"""
zapswap: single-asset liquidity provision ("zap") for constant-product pools.
"""

__version__ = "0.1.0"
