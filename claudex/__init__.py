"""Claude Code set manifests, install conflict handling and terminal hyperlink helpers."""

__version__ = "0.2.4"