"""Application composition layer for the backend link.

The controller wires settings, view models, adapters, and use cases into the
operations a host shell invokes; ``main`` is the command-line host.
"""
