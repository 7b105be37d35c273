"""Extraction, code generation and weaving of executable book examples."""
