"""Core domain package for pbwatch.

Core contains the snapshot model, codec, diffing and formatting logic without
any HTTP, HTML or filesystem-specific code, keeping the business logic
portable.
"""
