"""
Uniswap V3 monitoring agents.

Agents inspect transactions and blocks for large flash swaps, new pools,
pool balance swings, privileged address activity and admin events.
"""

__version__ = "0.1.0"
