"""Courier: an interactive mail session shell driving an external mail CLI."""

__version__ = "0.1.0"
