"""Convert website sitemaps into URL lists or Markdown pages."""

__version__ = "0.1.0"
