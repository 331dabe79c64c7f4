# foodiebot/services/menu.py
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from sqlalchemy import func
from sqlalchemy.orm import Session

from foodiebot.core.exceptions import MenuItemNotFound
from foodiebot.models.sql_models import MenuItem


@dataclass(frozen=True)
class MenuItemView:
    id: int
    name: str
    price: float
    description: Optional[str] = None
    category: Optional[str] = None
    is_trending: bool = False
    is_new: bool = False

    @classmethod
    def from_model(cls, item: MenuItem) -> "MenuItemView":
        return cls(
            id=item.id,
            name=item.name,
            price=item.price,
            description=item.description,
            category=item.category,
            is_trending=bool(item.is_trending),
            is_new=bool(item.is_new),
        )


class MenuSnapshot:
    """Frozen view of the available menu for one conversation turn."""

    def __init__(self, items: Sequence[MenuItemView]):
        self.items = list(items)
        self._by_name: Dict[str, MenuItemView] = {}
        for item in self.items:
            self._by_name.setdefault(item.name.strip().lower(), item)

    def find_available_by_name(self, name: str) -> Optional[MenuItemView]:
        return self._by_name.get(name.strip().lower())

    def __len__(self):
        return len(self.items)


class MenuCatalog:
    def __init__(self, db: Session):
        self.db = db

    def find_available_by_name(self, name: str) -> Optional[MenuItemView]:
        item = (
            self.db.query(MenuItem)
            .filter(func.lower(MenuItem.name) == name.strip().lower(), MenuItem.is_available == True)  # noqa: E712
            .first()
        )
        return MenuItemView.from_model(item) if item else None

    def list_available(self) -> List[MenuItemView]:
        items = (
            self.db.query(MenuItem)
            .filter(MenuItem.is_available == True)  # noqa: E712
            .order_by(MenuItem.category, MenuItem.name)
            .all()
        )
        return [MenuItemView.from_model(item) for item in items]

    def snapshot(self) -> MenuSnapshot:
        return MenuSnapshot(self.list_available())

    # --- Admin operations ---
    def list_all(self) -> List[MenuItem]:
        return self.db.query(MenuItem).order_by(MenuItem.category, MenuItem.name).all()

    def get(self, item_id: int) -> MenuItem:
        item = self.db.query(MenuItem).filter(MenuItem.id == item_id).first()
        if item is None:
            raise MenuItemNotFound(item_id)
        return item

    def create(self, **fields) -> MenuItem:
        item = MenuItem(**fields)
        self.db.add(item)
        self.db.commit()
        self.db.refresh(item)
        return item

    def update(self, item_id: int, **fields) -> MenuItem:
        item = self.get(item_id)
        for key, value in fields.items():
            setattr(item, key, value)
        self.db.commit()
        self.db.refresh(item)
        return item

    def delete(self, item_id: int) -> None:
        item = self.get(item_id)
        self.db.delete(item)
        self.db.commit()
