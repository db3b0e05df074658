"""Core business logic for the sentiment sweep.

Pure functions and models only: no Redis, no filesystem, no network.
"""
