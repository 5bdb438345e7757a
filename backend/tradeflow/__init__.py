"""Tradeflow: derivatives order validation and lifecycle simulation."""
