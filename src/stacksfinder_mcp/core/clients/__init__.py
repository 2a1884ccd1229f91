"""Clients for the remote StacksFinder recommendation service."""
