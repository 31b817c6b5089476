"""Reddit Shorts - Reddit stories narrated into captioned vertical videos."""

__version__ = "0.1.0"
