"""Cardamom custom order desk: order requests, hub review, notifications."""

__version__ = "0.1.0"
