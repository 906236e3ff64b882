"""INVOXA search query intelligence service."""
