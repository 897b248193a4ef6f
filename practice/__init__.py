"""Practice host: one human client plays heads-up against the house AI over WebSockets."""

from .server import PracticeSession, run_server

__all__ = ["PracticeSession", "run_server"]
