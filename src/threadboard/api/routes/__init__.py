"""Route modules for the threadboard API."""
