# Integration Module
"""
Instrumentation for the keystream generator: step recording, logging
hooks and register rendering.
"""

# Lazy imports to avoid RuntimeWarning when running module directly
def __getattr__(name):
    """Lazy import to avoid circular import issues."""
    from . import trace
    return getattr(trace, name)

__all__ = [
    'TraceRecorder',
    'format_register',
    'format_state',
    'format_step',
    'logging_hook',
]
