"""Cut list optimization for rectangular parts on stock sheets, with PDF reports."""

__version__ = "0.1.0"

__all__ = ["__version__"]