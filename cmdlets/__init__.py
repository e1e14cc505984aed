"""cmdlets - pluggable command registry and cascade invocation engine."""

__version__ = "0.3.0"

__all__ = ["__version__"]
