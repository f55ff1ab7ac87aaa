"""
Paysheet - Source Package

A small finance tracker: a JSON API over two Google Sheets tabs
(Users and Transactions) with token auth and period reports.

DESIGN PRINCIPLES:
1. The spreadsheet is the system of record
2. Fail early, fail visibly
3. No silent corrections
4. Every mutation must be auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Paysheet Team"
