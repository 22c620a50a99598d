"""LAWNLINE web application."""
