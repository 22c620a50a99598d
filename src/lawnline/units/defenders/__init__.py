"""Concrete defender types, one module per variant."""
