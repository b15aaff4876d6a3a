"""Use-case layer for orchestrating link workflows.

Each module coordinates domain objects and ports without performing socket
I/O directly, preserving MVVM + Hexagonal boundaries.
"""
