"""
Encounter decks.

A deck is a 50-card pool of creatures around a party level, balanced by
role and difficulty quotas. Hands drawn from it become ready-made
encounters.
"""
from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional, Sequence
import logging
import random
import uuid

from ..level_scaling import Difficulty
from .models import CardCategory, CombatInstance, CreatureCard, Encounter, EncounterSlot
from .repository import CreatureRepository

logger = logging.getLogger(__name__)

DECK_SIZE = 50
DECK_TRIES = 100
DRAW_TRIES = 1000

# Decks draw from [level - 2, level + 5]
DECK_LEVELS_BELOW = 2
DECK_LEVELS_ABOVE = 5

ROLE_QUOTAS: Dict[CardCategory, int] = {
    CardCategory.SOLDIER_BRUTE: 18,
    CardCategory.SKIRMISHER: 14,
    CardCategory.MINION: 5,
    CardCategory.ARTILLERY: 5,
    CardCategory.CONTROLLER: 5,
    CardCategory.LURKER: 2,
    CardCategory.SOLO: 1,
}

# Creatures fielded per card
CARD_COUNTS: Dict[CardCategory, int] = {
    CardCategory.SOLDIER_BRUTE: 2,
    CardCategory.MINION: 5,
}


def difficulty_quotas(level: int) -> Dict[Difficulty, int]:
    """Per-difficulty card quotas; low level decks have no trivial cards."""
    if level >= 3:
        quotas = {Difficulty.TRIVIAL: 7, Difficulty.EASY: 30}
    else:
        quotas = {Difficulty.TRIVIAL: 0, Difficulty.EASY: 37}
    quotas.update({Difficulty.MODERATE: 8, Difficulty.HARD: 5, Difficulty.EXTREME: 0})
    return quotas


@dataclass
class DeckCard:
    """A card in a deck, remembering whether it has been played."""
    card: CreatureCard
    drawn: bool = False

    def to_dict(self) -> Dict[str, Any]:
        data = self.card.to_dict()
        data["drawn"] = self.drawn
        return data


@dataclass
class EncounterDeck:
    """A balanced pool of creature cards for a party level."""
    level: int
    name: str = ""
    cards: List[DeckCard] = field(default_factory=list)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def count(self, category: CardCategory) -> int:
        return sum(1 for c in self.cards if c.card.category == category)

    def count_difficulty(self, difficulty: Difficulty) -> int:
        return sum(1 for c in self.cards if c.card.difficulty(self.level) == difficulty)

    @property
    def undrawn(self) -> List[DeckCard]:
        return [c for c in self.cards if not c.drawn]

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "level": self.level,
            "size": len(self.cards),
            "remaining": len(self.undrawn),
            "categories": {cat.value: self.count(cat) for cat in CardCategory},
            "difficulties": {d.value: self.count_difficulty(d) for d in Difficulty},
            "cards": [c.to_dict() for c in self.cards],
        }


def build_deck(
    creatures: CreatureRepository,
    level: int,
    rng: random.Random,
    categories: Optional[Sequence[str]] = None,
    keywords: Optional[Sequence[str]] = None,
    size: int = DECK_SIZE,
    tries: int = DECK_TRIES,
) -> Optional[EncounterDeck]:
    """
    Build a deck for a party level.

    Up to `tries` random picks are taken from the filtered pool, each kept
    only while both its role and its difficulty quota have room; the deck
    is then topped up from the unfiltered pool.

    Returns:
        The deck, or None if no creature matches the filters.
    """
    pool = creatures.cards(
        min_level=level - DECK_LEVELS_BELOW,
        max_level=level + DECK_LEVELS_ABOVE,
        categories=categories,
        keywords=keywords,
    )
    if not pool:
        return None

    role_left = dict(ROLE_QUOTAS)
    diff_left = difficulty_quotas(level)

    deck = EncounterDeck(level=level)
    for _ in range(tries):
        card = rng.choice(pool)

        category = card.category
        if role_left[category] <= 0:
            continue

        diff = card.difficulty(level)
        if diff_left[diff] <= 0:
            continue

        deck.cards.append(DeckCard(card))
        role_left[category] -= 1
        diff_left[diff] -= 1

        if len(deck.cards) == size:
            break

    quota_cards = len(deck.cards)
    fill_deck(deck, creatures, rng, size)

    logger.info(f"Built level {level} deck: {quota_cards} quota cards, {len(deck.cards)} total")
    return deck


def fill_deck(
    deck: EncounterDeck,
    creatures: CreatureRepository,
    rng: random.Random,
    size: int = DECK_SIZE
):
    """Top a deck up to size with unconstrained picks from its level window."""
    pool = creatures.cards(
        min_level=deck.level - DECK_LEVELS_BELOW,
        max_level=deck.level + DECK_LEVELS_ABOVE,
    )
    if not pool:
        return

    while len(deck.cards) < size:
        deck.cards.append(DeckCard(rng.choice(pool)))


def draw_encounter(deck: EncounterDeck, party_size: int, rng: random.Random) -> Optional[Encounter]:
    """
    Draw a hand and turn it into an encounter.

    A hand is party_size undrawn cards, plus one extra the first time a
    lurker turns up. Hands are redrawn until exactly one soldier/brute
    card is held (at most 1000 times). A solo card is played alone and
    the rest of the hand returned. Drawn cards are marked as played.

    Returns:
        The encounter, or None if every card has been drawn.
    """
    available = deck.undrawn
    if not available:
        return None

    hand: List[DeckCard] = []
    for attempt in range(1, DRAW_TRIES + 1):
        lurker = False
        hand_size = party_size
        while len(hand) < hand_size and available:
            deck_card = available.pop(rng.randrange(len(available)))
            hand.append(deck_card)

            if deck_card.card.category == CardCategory.LURKER and not lurker:
                hand_size += 1
                lurker = True

        soldiers = sum(1 for c in hand if c.card.category == CardCategory.SOLDIER_BRUTE)
        if soldiers == 1 or attempt == DRAW_TRIES:
            break

        available.extend(hand)
        hand = []

    for deck_card in hand:
        if deck_card.card.category == CardCategory.SOLO:
            hand = [deck_card]
            break

    encounter = Encounter()
    for deck_card in hand:
        deck_card.drawn = True
        card = deck_card.card

        slot = next(
            (s for s in encounter.slots if s.card.creature_id == card.creature_id),
            None
        )
        if slot is None:
            slot = EncounterSlot(card=card)
            encounter.slots.append(slot)

        count = CARD_COUNTS.get(card.category, 1)
        slot.instances.extend(CombatInstance() for _ in range(count))

    encounter.set_default_display_names()
    encounter.set_standard_notes()
    return encounter
