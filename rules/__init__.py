"""Recognizer rule sets for tax document text."""
