"""QuillPass: diagnostic pipeline for structured rich-text documents."""

__version__ = "0.4.0"
