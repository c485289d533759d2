"""
Weekly Wallet - Source Package

A local personal weekly-budgeting ledger: a fixed weekly allowance,
planned / actual / saving transactions, weekly archival and analytics.

DESIGN PRINCIPLES:
1. Ledger operations are pure: (state, input) -> new state
2. Reject bad input, never silently fix it
3. total_savings always matches the recorded savings
4. Network collaborators degrade to safe defaults
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Weekly Wallet Team"
