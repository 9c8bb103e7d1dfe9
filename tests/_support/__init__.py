"""Shared helpers for adr-spine tests."""
