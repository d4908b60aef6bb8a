"""Adapters that connect the core watcher to HTTP, HTML and the filesystem."""
