"""
HotelSphere Realtime — Errors
===============================
Error types for change-feed subscription.
Parsing failures of incoming messages use integration ValidationError.
"""

from integration.adapters import IntegrationError


class RealtimeError(IntegrationError):
    """Base error for realtime channel operations."""
    pass


class UnknownChannelTableError(RealtimeError):
    """Subscription to a table the replica does not publish."""

    def __init__(self, table: str):
        self.table = table
        super().__init__(f"Cannot subscribe to unknown table '{table}'.")


class DuplicateHandlerError(RealtimeError):
    """Same handler already subscribed to this table."""

    def __init__(self, table: str, handler_name: str):
        self.table = table
        self.handler_name = handler_name
        super().__init__(
            f"Handler '{handler_name}' already subscribed "
            f"to table '{table}'."
        )


class RealtimeJoinError(RealtimeError):
    """Replica refused the change-feed subscription or reported it broken."""

    def __init__(self, topic: str, detail: str):
        self.topic = topic
        self.detail = detail
        super().__init__(f"Realtime subscription '{topic}' refused: {detail}")
