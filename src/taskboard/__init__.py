"""Multi-user task and project tracker."""

__version__ = "0.1.0"

__all__ = ["__version__"]
