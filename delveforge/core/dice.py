"""
Dice expressions for creature statistics.

Handles the (throws, sides, constant) triples used by power damage and
check rolls:
- Lenient parsing from free power text ("2d6 + 4 fire damage")
- Canonical formatting (2d6+4, 1d8-1, 5)
- Maximum, average and rolled values
"""
import random
from dataclasses import dataclass, replace
from typing import Optional

DIGITS = "0123456789"
STOP_WORDS = ("damage", "dmg")


def roll_die(sides: int, rng: Optional[random.Random] = None) -> int:
    """Roll a single die with the given number of sides."""
    if sides < 1:
        raise ValueError(f"Invalid die: d{sides}")
    return (rng or random).randint(1, sides)


@dataclass(frozen=True)
class DiceExpression:
    """A dice roll such as 2d6+4: throws dice of sides faces plus a constant."""
    throws: int = 0
    sides: int = 0
    constant: int = 0

    @classmethod
    def parse(cls, text: str) -> Optional["DiceExpression"]:
        """
        Parse a dice expression out of free text.

        Reading stops at the words "damage" or "dmg", so "2d8 + 5 fire
        damage plus 1d6" yields 2d8+5. A minus sign seen after the first
        number negates the constant. Only the first constant counts.

        Returns:
            The expression, or None if the text is malformed or names
            neither dice nor a constant.
        """
        if text is None:
            return None

        text = text.lower().replace("+", " + ").replace("-", " - ")

        throws = 0
        sides = 0
        constant = 0
        started = False
        minus = False

        try:
            for token in text.split():
                if token in STOP_WORDS:
                    break

                if token == "-" and started:
                    minus = True
                    continue

                if not any(ch in DIGITS for ch in token):
                    continue

                d_index = token.find("d")
                if d_index != -1:
                    throws_text = token[:d_index]
                    if throws_text:
                        throws = int(throws_text)
                    sides = int(token[d_index + 1:])
                elif constant == 0:
                    constant = int(token)
                    if minus:
                        constant = -constant

                started = True
        except ValueError:
            return None

        if throws == 0 and constant == 0:
            return None

        return cls(throws=throws, sides=sides, constant=constant)

    @property
    def maximum(self) -> int:
        """Highest possible roll."""
        return self.throws * self.sides + self.constant

    @property
    def average(self) -> float:
        """Mean roll."""
        return self.throws * (self.sides + 1) / 2 + self.constant

    def evaluate(self, rng: Optional[random.Random] = None) -> int:
        """Roll the expression."""
        total = self.constant
        for _ in range(self.throws):
            total += roll_die(self.sides, rng)
        return total

    def with_changes(self, **changes) -> "DiceExpression":
        """Copy of this expression with some fields replaced."""
        return replace(self, **changes)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "throws": self.throws,
            "sides": self.sides,
            "constant": self.constant,
            "expression": str(self),
            "maximum": self.maximum,
            "average": self.average,
        }

    def __str__(self) -> str:
        text = ""
        if self.throws != 0:
            text = f"{self.throws}d{self.sides}"

        if self.constant != 0:
            if text and self.constant > 0:
                text += "+"
            text += str(self.constant)

        return text or "0"
