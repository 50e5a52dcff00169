"""Breakout room client: negotiate entry into invitation-gated rooms."""

__version__ = "0.1.0"
