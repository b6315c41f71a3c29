"""Build JSON Schema documents from Protocol Buffers descriptors."""

__version__ = "1.4.0"