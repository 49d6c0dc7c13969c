"""Passkey-checked HTTP gateway that forwards account lock-toggle requests, with a small client."""

__version__ = "0.1.0"

__all__ = ["client", "forwarder", "server"]