"""Social Insights - turn free-text AI answers about social media data into structured records."""

__version__ = "1.0.0"
