"""
Auction Ledger

Settlement logic for timed, bid-based sales of unique digital property:
- Ascending and Dutch auction protocols behind one dispatcher
- Sealed commit-reveal bidding phase
- Commission and settlement through an asset service
- A simulated ledger host with atomic transactions
"""

__version__ = "0.1.4"
