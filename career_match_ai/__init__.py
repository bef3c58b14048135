"""Career Match AI: profile URL + career goal -> comparable professionals."""

__version__ = "0.1.0"
