"""commercetools to Google Cloud Retail catalog synchronization."""

__version__ = "1.0.0"
