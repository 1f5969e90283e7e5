"""
TradeChain - Letter of Credit network.

Multi-party letter-of-credit workflow: banks and trading parties record
approvals, shipment evidence and receipt confirmations against a shared
letter whose lifecycle is governed by a pure transition engine.
"""

__version__ = "0.1.0"
