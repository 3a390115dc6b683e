"""Server core: settings and shared constants."""
