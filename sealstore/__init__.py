"""Snapshot-versioned cluster storage, slot allocation and Mersenne-31 field helpers."""

__version__ = "0.1.0"