"""l2wp: convert exported Lovable projects into page-builder documents."""

__version__ = "2.0.0"
