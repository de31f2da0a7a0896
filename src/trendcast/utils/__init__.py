"""Shared configuration and numeric helpers."""
