"""
Hisaab - Source Package

A local invoice management tool for a single shop keeper: line-itemed
invoices priced with a trade-price formula, partial payments, and a
printable PDF.

DESIGN PRINCIPLES:
1. Derived money values are always recomputed, never trusted
2. Pricing is pure; storage is swappable
3. Every save writes the whole record
"""

__version__ = "1.0.0"
__author__ = "Hisaab Team"
