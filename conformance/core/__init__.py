"""Core types: errors, outcomes, fixtures, units and identified-object helpers."""
