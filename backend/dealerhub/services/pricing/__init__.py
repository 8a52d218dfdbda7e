"""Vehicle and quote pricing."""
