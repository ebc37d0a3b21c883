"""
Finance Tracker - Source Package

A small personal finance tracker: running balance, savings, income and
expense logs, and weekly/yearly statistics behind an HTTP JSON API.

DESIGN PRINCIPLES:
1. The whole state is one document
2. Every operation is load -> mutate -> save under one lock
3. Statistics roll over on every access, through one code path
4. Storage failures are absorbed, but always logged
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Finance Tracker Team"
