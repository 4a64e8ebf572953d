"""
Signals published by the engine.

External collaborators (badge engine, progress persistence) subscribe here
instead of being called directly.

Usage:
    from vocab_mastery.core.signals import mastery_transitioned

    @mastery_transitioned.connect
    def on_transition(sender, event, **kwargs):
        ...
"""

from blinker import Namespace

mastery_signals = Namespace()

# Fired after a transition has been written. Payload: event (TransitionEvent)
mastery_transitioned = mastery_signals.signal("mastery-transitioned")

# Fired when a session is finalized. Payload: summary (SessionSummary)
session_completed = mastery_signals.signal("session-completed")
