"""
Finance Tracker - Source Package

A personal finance tracker: record income and expenses, see totals and a
daily cash-flow chart, browse history by month, and edit images with Gemini.

DESIGN PRINCIPLES:
1. The store is the single source of truth during a session
2. Derived views are recomputed, never stored
3. Corrupted local data never blocks the user
4. "No image returned" is not an error
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Finance Tracker Team"
