# foodiebot/services/order_parser.py
"""Free-text order parsing: "Burger x2, Pizza x1" -> resolved order lines."""
import re
from dataclasses import dataclass, field
from typing import List, NamedTuple, Optional

from foodiebot.services.menu import MenuItemView

ORDER_PATTERN = re.compile(r"([a-zA-Z0-9\s]+)\s*x\s*(\d+)", re.IGNORECASE)


class OrderCandidate(NamedTuple):
    raw_name: str
    quantity: int


@dataclass(frozen=True)
class OrderLine:
    menu_item_id: int
    name: str
    quantity: int
    price: float

    @property
    def line_total(self) -> float:
        return self.price * self.quantity

    def as_dict(self) -> dict:
        return {
            "menu_item_id": self.menu_item_id,
            "name": self.name,
            "quantity": self.quantity,
            "price": self.price,
        }


@dataclass
class IntakeResult:
    resolved: List[OrderLine] = field(default_factory=list)
    unresolved: List[str] = field(default_factory=list)

    @property
    def subtotal(self) -> float:
        return sum(line.line_total for line in self.resolved)

    @property
    def is_empty(self) -> bool:
        return not self.resolved and not self.unresolved


def looks_like_order(text: str) -> bool:
    return bool(text) and ORDER_PATTERN.search(text) is not None


def parse_order_text(text: str) -> List[OrderCandidate]:
    # Repeated names stay separate lines
    candidates = []
    for match in ORDER_PATTERN.finditer(text or ""):
        name = match.group(1).strip()
        quantity = int(match.group(2))
        if not name or quantity < 1:
            continue
        candidates.append(OrderCandidate(name, quantity))
    return candidates


def resolve_candidates(candidates: List[OrderCandidate], catalog) -> IntakeResult:
    """Split candidates into priced lines and names the catalog does not sell.

    `catalog` is anything with find_available_by_name(name): a MenuCatalog or
    a MenuSnapshot.
    """
    result = IntakeResult()
    for candidate in candidates:
        item: Optional[MenuItemView] = catalog.find_available_by_name(candidate.raw_name)
        if item is None:
            result.unresolved.append(candidate.raw_name)
            continue
        result.resolved.append(OrderLine(item.id, item.name, candidate.quantity, item.price))
    return result
