"""
Core modules for Caffeine Tracker.

This package contains the decay model, daily aggregation, sleep
disruption forecast and the beverage catalog.
"""
