"""
Journal bounded context: domain layer.

This module contains all domain logic for the journal context:
- Trade and holding P&L derivation
- Performance statistics and reports
- Technical indicators for charting
- Trading calculators
- CSV import/export codec
"""
