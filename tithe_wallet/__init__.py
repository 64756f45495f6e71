"""
Tithe Wallet - Source Package

A personal income wallet that sets aside a 10% tithe, tracks which
months have been paid, and measures progress toward a prosperity goal.

DESIGN PRINCIPLES:
1. Records are the only truth; every figure is derived from them
2. The whole wallet is persisted as one document on every change
3. Destructive actions require explicit confirmation
4. External services (quotes, AI tips) are decoration and never block
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Tithe Wallet Team"
