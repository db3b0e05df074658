"""Configuration sweep tooling: fleet launcher and winner selector.

Usage:
    python -m sweep.launcher
    python -m sweep.winners
"""
