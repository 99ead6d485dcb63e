"""kubectl access policy, command building, event filtering and chat message formatting."""

__version__ = "0.1.0"