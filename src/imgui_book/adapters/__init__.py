"""Adapters binding the core pipeline to markdown-it-py and mdBook."""
