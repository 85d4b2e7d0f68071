"""Ts.ED CLI -- scaffolding and package.json management for Ts.ED projects."""

__version__ = "0.1.0"
