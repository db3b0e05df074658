"""Sentiment trading worker.

One process per config file: reads the order book every cycle, records its
signal and the mid price, and keeps its performance record up to date.

Usage:
    CONFIG_FILE_NAME=.env.fast python -m bot
"""
