"""Session subsystem for MarketChat.

Provides the authentication lifecycle manager.
"""

from marketchat.runtime.session.manager import SessionManager

__all__ = ["SessionManager"]
