"""trainkit - train machine-learning models from the command line."""

__version__ = "1.2.0"
