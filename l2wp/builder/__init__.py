"""Translation of Lovable sources into page-builder document trees."""
