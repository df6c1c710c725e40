"""LMS presentation portal."""
