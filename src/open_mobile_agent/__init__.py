"""Semantic UI inspection and control for Android and iOS devices."""

__version__ = "0.1.0"
