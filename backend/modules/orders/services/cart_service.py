# backend/modules/orders/services/cart_service.py

"""
Cart composition and merge rules.

A line's identity is its merge key (menu item id plus the canonical
modifier names) together with its note: same key and same note add
quantities, a different note always starts a new line.
"""

import logging
import re
from typing import Dict, Iterable, List, Optional, Sequence

from core.exceptions import NotFoundError, ValidationError
from modules.menu.schemas.menu_schemas import MenuItemRead
from ..schemas.cart_schemas import CartItem, normalize_note
from ..schemas.order_schemas import OrderItemCreate, OrderRead, SelectedModifier
from .pricing_service import calculate_subtotal

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")


def modifiers_key(option_names: Iterable[str]) -> str:
    """Sorted, whitespace-stripped option names joined with '-'"""
    return "-".join(sorted(_WHITESPACE.sub("", name) for name in option_names))


def cart_item_key(menu_item_id: int, modifiers: Iterable[SelectedModifier]) -> str:
    return f"{menu_item_id}-{modifiers_key(m.option_name for m in modifiers)}"


def resolve_modifiers(
    menu_item: MenuItemRead, option_names: Sequence[str]
) -> List[SelectedModifier]:
    """Look option names up in the item's modifier groups and snapshot their prices"""
    options = {}
    for group in menu_item.modifier_groups:
        for option in group.options:
            options.setdefault(option.name, option)

    selected = []
    for name in option_names:
        option = options.get(name)
        if option is None:
            raise ValidationError(
                f"'{name}' is not a modifier of {menu_item.name}",
                error_code="UNKNOWN_MODIFIER",
            )
        selected.append(SelectedModifier(option_name=option.name, option_price=option.price))
    return selected


def merge_notes(existing: Optional[str], note: Optional[str]) -> Optional[str]:
    """Join note onto existing with '; ', skipping blanks and repeats"""
    notes = [part.strip() for part in (existing or "").split(";") if part.strip()]
    note = normalize_note(note)
    if note and note not in notes:
        notes.append(note)
    return "; ".join(notes) or None


class Cart:
    def __init__(self, items: Optional[Iterable[CartItem]] = None, notes: Optional[str] = None):
        self.items: List[CartItem] = []
        self.notes = normalize_note(notes)
        for item in items or []:
            self.add_item(item)

    def __len__(self) -> int:
        return len(self.items)

    @property
    def is_empty(self) -> bool:
        return not self.items

    @property
    def subtotal(self):
        return calculate_subtotal(self.items)

    def _find(self, line_id: str) -> CartItem:
        for item in self.items:
            if item.line_id == line_id:
                return item
        raise NotFoundError(f"Cart line {line_id} not found")

    def _find_mergeable(self, cart_item_id: str, notes: Optional[str], exclude: str = None):
        for item in self.items:
            if item.line_id == exclude:
                continue
            if item.cart_item_id == cart_item_id and item.notes == normalize_note(notes):
                return item
        return None

    def add_item(self, item: CartItem) -> CartItem:
        existing = self._find_mergeable(item.cart_item_id, item.notes)
        if existing:
            existing.quantity += item.quantity
            existing.is_unresolved = existing.is_unresolved or item.is_unresolved
            return existing
        self.items.append(item)
        return item

    def add_menu_item(
        self,
        menu_item: MenuItemRead,
        quantity: int = 1,
        modifier_names: Sequence[str] = (),
        notes: Optional[str] = None,
    ) -> CartItem:
        if not menu_item.is_available:
            raise ValidationError(
                f"{menu_item.name} is currently unavailable", error_code="ITEM_UNAVAILABLE"
            )
        modifiers = resolve_modifiers(menu_item, modifier_names)
        return self.add_item(
            CartItem(
                cart_item_id=cart_item_key(menu_item.id, modifiers),
                menu_item_id=menu_item.id,
                name=menu_item.name,
                base_price=menu_item.price,
                quantity=quantity,
                selected_modifiers=modifiers,
                notes=notes,
            )
        )

    def update_quantity(self, line_id: str, delta: int) -> Optional[CartItem]:
        """Change a line's quantity by delta; reaching zero removes the line"""
        item = self._find(line_id)
        return self.set_quantity(line_id, item.quantity + delta)

    def set_quantity(self, line_id: str, quantity: int) -> Optional[CartItem]:
        item = self._find(line_id)
        if quantity <= 0:
            self.items.remove(item)
            return None
        item.quantity = quantity
        return item

    def set_note(self, line_id: str, notes: Optional[str]) -> CartItem:
        item = self._find(line_id)
        twin = self._find_mergeable(item.cart_item_id, notes, exclude=line_id)
        if twin:
            # Now identical to another line: fold into it
            twin.quantity += item.quantity
            self.items.remove(item)
            return twin
        item.notes = notes
        return item

    def append_quick_note(self, line_id: str, text: str) -> CartItem:
        item = self._find(line_id)
        text = normalize_note(text)
        if not text:
            return item
        return self.set_note(line_id, f"{item.notes}, {text}" if item.notes else text)

    def remove(self, line_id: str) -> None:
        self.items.remove(self._find(line_id))

    def clear(self) -> None:
        self.items.clear()
        self.notes = None

    def to_order_items(self) -> List[OrderItemCreate]:
        """Order lines with prices locked; unresolved lines cannot be submitted"""
        unresolved = [item.name for item in self.items if item.is_unresolved]
        if unresolved:
            raise ValidationError(
                f"Cart has items no longer on the menu: {', '.join(unresolved)}",
                error_code="UNRESOLVED_ITEMS",
            )
        return [
            OrderItemCreate(
                menu_item_id=item.menu_item_id,
                name=item.name,
                base_price=item.base_price,
                price=item.unit_price,
                quantity=item.quantity,
                selected_modifiers=item.selected_modifiers,
                notes=item.notes,
                is_completed=False,
            )
            for item in self.items
        ]

    @classmethod
    def from_orders(
        cls, orders: Iterable[OrderRead], menu_items: Dict[int, MenuItemRead]
    ) -> "Cart":
        """
        Consolidated ticket over every item of every given order.

        Lines are merged with the same rule as add_item; distinct order
        notes are joined with '; '.
        """
        cart = cls()
        for order in orders:
            cart.notes = merge_notes(cart.notes, order.notes)
            for line in order.items:
                unresolved = line.menu_item_id not in menu_items
                if unresolved:
                    logger.warning(
                        f"Order {order.id} line {line.line_index} references missing "
                        f"menu item {line.menu_item_id}"
                    )
                cart.add_item(
                    CartItem(
                        cart_item_id=cart_item_key(line.menu_item_id, line.selected_modifiers),
                        menu_item_id=line.menu_item_id,
                        name=line.name,
                        base_price=line.base_price,
                        quantity=line.quantity,
                        selected_modifiers=line.selected_modifiers,
                        notes=line.notes,
                        is_unresolved=unresolved,
                    )
                )
        return cart
