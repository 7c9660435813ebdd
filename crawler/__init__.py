"""One-Page Dungeon crawler.

Compiles One-Page Dungeon JSON documents into a navigable graph and runs a
deterministic, turn-based interpreter over it.
"""
