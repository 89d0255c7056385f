"""Ingest helpers that turn uploaded files into import candidates."""
