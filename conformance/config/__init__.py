"""Capability and collaborator keys."""
