"""Domain modules for the reminder bot."""
