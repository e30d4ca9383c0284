"""Inkboard command line application."""
