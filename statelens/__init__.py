"""statelens: introspect and visualize running finite state machines

This package defines small example machines, runs them, and renders any
running machine generically: its state value, its context and the events it
can accept right now.

Responsibilities:
    - Machine definition from configuration mappings
    - Transition introspection (available events)
    - Generic rendering of state, context and events
    - Demo harness composing the renderer with documentation text
    - Process-wide handle to an external inspector

Interactions:
    - Client code through public API
    - Any engine exposing snapshots with ``value`` and ``context``
    - System web browser for the inspector surface

Cross-cutting Concerns:
    Error Handling:
        - Structured error hierarchy rooted in StateLensError
        - Presentation code is fail-soft: missing data renders as empty sections

    Logging:
        - Module-level loggers under the ``statelens`` namespace
        - No handlers installed by the library

    Configuration:
        - STATELENS_ENV selects development or production mode
        - STATELENS_INSPECTOR_URL overrides the inspector address
"""

__version__ = "0.1.0"
