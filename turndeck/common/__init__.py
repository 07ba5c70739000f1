"""Shared building blocks: shuffling and card instance identity."""
