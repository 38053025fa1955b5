"""Trucking Analytics — load profitability and quarterly P&L reporting engine."""

__version__ = "1.0.0"
