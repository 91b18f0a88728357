"""CLI module for fundfolio.

Provides command-line interfaces for:
- Portfolio summary, allocation and projection reports
- Batch valuation refresh
- Spreadsheet import
- Snapshot export and import
"""
