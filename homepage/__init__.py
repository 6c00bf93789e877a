"""Personal website server: JSON blog posts, static files, and a teapot."""

__version__ = "0.1.0"
