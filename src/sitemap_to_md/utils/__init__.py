"""Utility functions and classes."""

from sitemap_to_md.utils.naming import derive_filename, sanitize_filename
from sitemap_to_md.utils.rate_limiter import RateLimiter
from sitemap_to_md.utils.url_utils import default_list_output_path, is_url, last_url_segment

__all__ = [
    "RateLimiter",
    "derive_filename",
    "sanitize_filename",
    "default_list_output_path",
    "is_url",
    "last_url_segment",
]
