"""floresta-cln - Core Lightning backend plugin backed by a Floresta node."""

__version__ = "0.1.0"
__all__ = ["__version__"]
