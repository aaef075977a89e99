"""Structure file readers and molecule adapters."""
