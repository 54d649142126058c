"""
Tour Pricing Package

Dynamic pricing for wine tours, transfers and driver wait time.
Resolves quotes using Tier → Base Rate → Modifiers → Minimum Charge pipeline.
"""

__version__ = "1.0.0"
