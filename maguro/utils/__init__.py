"""
Utilities Layer.

Small helpers for human-readable formatting and output path templating.
"""
