"""Alignment and highlight synthesis stages."""
