"""
Caffeine Tracker: intake ledger and caffeine decay estimates.
"""
