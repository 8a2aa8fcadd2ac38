"""Clients for the external text-generation and WordPress services."""
