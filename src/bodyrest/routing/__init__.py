"""Routing: pattern registration and request matching.

A match yields the ``Route`` whose ``path`` is the pattern string; the
binder reads path values from it by segment position.
"""
