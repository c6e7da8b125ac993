"""Blorb container building blocks."""
