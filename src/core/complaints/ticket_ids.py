"""
Human readable ticket identifiers.

Format: ``<PREFIX>-<YY><MM>-<NNNN>``, e.g. ``VHU-2503-0042``.

The numeric part is a running total taken from an atomic sequence; it is
never reset by month or year, and grows past four digits once it exceeds
9999.
"""

from datetime import datetime
from typing import Optional
import logging

from src.core.shared.events import utcnow

from .ports import TicketSequence

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "VHU"


def format_ticket_id(created_at: datetime, sequence: int, prefix: str = DEFAULT_PREFIX) -> str:
    """
    Formats a ticket identifier.

    Args:
        created_at: Creation timestamp (year and month are used)
        sequence: Sequence value, 1 or greater
        prefix: Identifier prefix

    Returns:
        Identifier string

    Example:
        >>> format_ticket_id(datetime(2025, 3, 1), 7)
        'VHU-2503-0007'
    """
    if sequence < 1:
        raise ValueError(f"Sequence must be positive, got {sequence}")
    return f"{prefix}-{created_at:%y%m}-{sequence:04d}"


class TicketIdentifierGenerator:
    """
    Allocates unique ticket identifiers.

    Uniqueness comes from the sequence primitive: every call to
    ``next_value`` returns a distinct number, even under concurrent
    creation. Call ``next_identifier`` inside the creation transaction.

    Example:
        generator = TicketIdentifierGenerator(InMemoryTicketSequence())
        generator.next_identifier()  # 'VHU-2503-0001'
    """

    def __init__(self, sequence: TicketSequence, prefix: str = DEFAULT_PREFIX):
        self.sequence = sequence
        self.prefix = prefix

    def next_identifier(self, created_at: Optional[datetime] = None) -> str:
        value = self.sequence.next_value()
        ticket_id = format_ticket_id(created_at or utcnow(), value, self.prefix)
        logger.debug(f"Allocated ticket id {ticket_id}")
        return ticket_id
