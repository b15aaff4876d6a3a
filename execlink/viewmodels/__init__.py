"""ViewModel package for link state and command surfaces.

Call context:
    ``execlink/app`` modules import concrete viewmodels from this package to
    bind host callbacks to state transitions.

Dependencies:
    Modules in this package depend on domain types and lightweight formatting
    helpers only. Socket adapters and use-case orchestration remain outside.
"""
