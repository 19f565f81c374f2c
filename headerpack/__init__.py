"""headerpack - merge a tree of included headers into one file."""

__version__ = "1.0.0"
