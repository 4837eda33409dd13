"""doccheck: consistency checker for documentation trees."""

__version__ = "0.1.0"
