"""File tools: checksums, file merging, HTTP probing, release archives and a program launcher."""

__version__ = "0.1.0"

__all__ = ["checksum", "merge", "httptool", "release", "launcher"]