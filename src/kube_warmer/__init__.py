"""Keep authenticated connections to many Kubernetes clusters warm."""

__version__ = "0.1.0"
