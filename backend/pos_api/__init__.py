"""POS back-office maintenance API."""
