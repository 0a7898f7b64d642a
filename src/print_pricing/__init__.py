"""
Print Pricing Package

Pricing engine for custom print products (business cards, flyers, banners).
Turns a size, quantity, paper, sides, turnaround and add-on configuration
into a final price with a step-by-step breakdown.
"""

__version__ = "1.0.0"
