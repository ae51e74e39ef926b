# src/shufflestore/cards.py
"""Single-byte card records.

A card is stored as one byte: ``suit * CARD_OFFSET + rank``. Because
``CARD_OFFSET`` (32) is larger than the number of ranks (13) no two
``(rank, suit)`` pairs share an encoding, and the inverse is a plain
``divmod``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

__all__ = [
    "CARD_OFFSET",
    "Rank",
    "Suit",
    "Card",
    "encode",
    "decode",
    "card_name",
    "standard_sequence",
    "DECK_SIZE",
]

CARD_OFFSET = 32


class Rank(IntEnum):
    ACE = 0
    TWO = 1
    THREE = 2
    FOUR = 3
    FIVE = 4
    SIX = 5
    SEVEN = 6
    EIGHT = 7
    NINE = 8
    TEN = 9
    JACK = 10
    QUEEN = 11
    KING = 12


class Suit(IntEnum):
    SPADE = 0
    HEART = 1
    CLUB = 2
    DIAMOND = 3


_RANK_NAMES = ("Ace", "Two", "Three", "Four", "Five", "Six", "Seven",
               "Eight", "Nine", "Ten", "Jack", "Queen", "King")
_SUIT_NAMES = ("Spade", "Heart", "Club", "Diamond")

DECK_SIZE = len(Rank) * len(Suit)


def _name(names: tuple[str, ...], index: int) -> str:
    # total lookup: anything outside the table renders as ""
    if index < 0 or index >= len(names):
        return ""
    return names[index]


def encode(rank: Rank | int, suit: Suit | int) -> int:
    """Return the byte value for ``(rank, suit)``."""
    rank = int(rank)
    suit = int(suit)
    if not 0 <= rank < len(Rank):
        raise ValueError(f"rank index out of range: {rank}")
    if not 0 <= suit < len(Suit):
        raise ValueError(f"suit index out of range: {suit}")
    return suit * CARD_OFFSET + rank


@dataclass(frozen=True, slots=True)
class Card:
    """An immutable card decoded from (or destined for) one byte.

    ``rank`` and ``suit`` are raw indices. Values produced by :func:`decode`
    on an arbitrary byte may fall outside :class:`Rank` / :class:`Suit`; such
    cards still round-trip through :attr:`value` and render with empty names.
    """

    rank: int
    suit: int

    @classmethod
    def of(cls, rank: Rank | int, suit: Suit | int) -> "Card":
        encode(rank, suit)  # validates
        return cls(int(rank), int(suit))

    @classmethod
    def from_value(cls, value: int) -> "Card":
        return decode(value)

    @property
    def value(self) -> int:
        return self.suit * CARD_OFFSET + self.rank

    def __str__(self) -> str:
        return card_name(self)


def decode(value: int) -> Card:
    """Split a byte back into ``(rank, suit)``; any value in ``0..255`` decodes."""
    value = int(value)
    if not 0 <= value <= 0xFF:
        raise ValueError(f"card value must fit in one byte, got {value}")
    suit, rank = divmod(value, CARD_OFFSET)
    return Card(rank, suit)


def card_name(card: Card) -> str:
    """Return ``"<Rank> of <Suit>s"``, e.g. ``"King of Diamonds"``.

    Out-of-range rank or suit indices render as empty strings rather than
    raising, so a stray byte yields ``" of s"`` style text.
    """
    return f"{_name(_RANK_NAMES, card.rank)} of {_name(_SUIT_NAMES, card.suit)}s"


def standard_sequence() -> tuple[Card, ...]:
    """Return the 52 cards in deck order: suits outer, ranks inner."""
    return tuple(Card(int(rank), int(suit)) for suit in Suit for rank in Rank)
