# backend/modules/inventory/services/inventory_ledger.py

from sqlalchemy.orm import Session
from typing import List, Dict, Iterable, Optional
from dataclasses import dataclass, field
from decimal import Decimal
import logging

from modules.menu.models.menu_models import MenuItem
from modules.menu.schemas.menu_schemas import RecipeLine
from modules.orders.utils.money import to_decimal
from ..models.inventory_models import Ingredient, InventoryAdjustment

logger = logging.getLogger(__name__)


@dataclass
class DeductionResult:
    # ingredient_id -> quantity removed from stock
    deducted: Dict[int, Decimal] = field(default_factory=dict)
    items_deducted: int = 0
    items_skipped: int = 0
    unresolved_menu_items: List[int] = field(default_factory=list)
    missing_ingredients: List[int] = field(default_factory=list)
    negative_stock: List[int] = field(default_factory=list)

    @property
    def total_ingredients(self) -> int:
        return len(self.deducted)


def calculate_deductions(
    items: Iterable, recipes: Dict[int, List[RecipeLine]]
) -> Dict[int, Decimal]:
    """
    ingredient_id -> sum(recipe quantity x item quantity) across the batch

    Items whose menu item has no entry in recipes contribute nothing.
    """
    required: Dict[int, Decimal] = {}
    for item in items:
        for line in recipes.get(item.menu_item_id, []):
            amount = to_decimal(line.quantity) * item.quantity
            required[line.ingredient_id] = required.get(line.ingredient_id, Decimal("0")) + amount
    return required


class InventoryLedger:
    """
    Recipe-driven stock decrements.

    Works inside the caller's session and never commits: the decrement,
    the audit rows and the inventory_deducted flags land in whatever
    transaction finalizes the order.
    """

    def __init__(self, db: Session):
        self.db = db

    def _load_recipes(self, menu_item_ids: Iterable[int]) -> Dict[int, List[RecipeLine]]:
        ids = set(menu_item_ids)
        if not ids:
            return {}
        rows = self.db.query(MenuItem).filter(MenuItem.id.in_(ids)).all()
        return {
            row.id: [RecipeLine.model_validate(line) for line in row.recipe or []]
            for row in rows
        }

    def deduct(
        self,
        order_items: Iterable,
        order_id: Optional[int] = None,
        reason: str = "order_completion",
    ) -> DeductionResult:
        """
        Deduct stock for every not-yet-deducted item, at most once per item.

        Each ingredient is written once for the whole batch; audit rows are
        split per order (order_id, or else each item's own order_id).
        Stock is allowed to go negative; that is logged and reported, not
        refused.
        """
        result = DeductionResult()
        pending = []
        for item in order_items:
            if item.inventory_deducted:
                result.items_skipped += 1
            else:
                pending.append(item)

        if not pending:
            return result

        recipes = self._load_recipes(item.menu_item_id for item in pending)

        by_order: Dict[Optional[int], List] = {}
        for item in pending:
            if item.menu_item_id in recipes:
                owner = order_id if order_id is not None else getattr(item, "order_id", None)
                by_order.setdefault(owner, []).append(item)
            else:
                # Left unmarked so a later finalization can still deduct it
                logger.warning(
                    f"Cannot deduct inventory for menu item {item.menu_item_id}: "
                    f"menu item no longer exists"
                )
                if item.menu_item_id not in result.unresolved_menu_items:
                    result.unresolved_menu_items.append(item.menu_item_id)

        resolved = [item for items in by_order.values() for item in items]
        required = calculate_deductions(resolved, recipes)
        required_by_order = {
            owner: calculate_deductions(items, recipes) for owner, items in by_order.items()
        }

        ingredients = {}
        if required:
            rows = (
                self.db.query(Ingredient)
                .filter(Ingredient.id.in_(required.keys()))
                .order_by(Ingredient.id)
                .with_for_update()
                .all()
            )
            ingredients = {row.id: row for row in rows}

        for ingredient_id, quantity in sorted(required.items()):
            ingredient = ingredients.get(ingredient_id)
            if ingredient is None:
                logger.warning(f"Recipe ingredient {ingredient_id} not found; skipping")
                result.missing_ingredients.append(ingredient_id)
                continue

            before = to_decimal(ingredient.stock)
            after = before - quantity
            ingredient.stock = after

            running = before
            for owner, owner_required in required_by_order.items():
                share = owner_required.get(ingredient_id)
                if not share:
                    continue
                self.db.add(
                    InventoryAdjustment(
                        ingredient_id=ingredient_id,
                        order_id=owner,
                        quantity_before=running,
                        quantity_change=-share,
                        quantity_after=running - share,
                        unit=ingredient.unit,
                        reason=reason,
                    )
                )
                running -= share
            result.deducted[ingredient_id] = quantity

            if after < 0:
                logger.warning(
                    f"Ingredient {ingredient.name} ({ingredient_id}) stock is negative: "
                    f"{after} {ingredient.unit}"
                )
                result.negative_stock.append(ingredient_id)

        for item in resolved:
            item.inventory_deducted = True
        result.items_deducted = len(resolved)

        logger.info(
            f"Inventory deducted for {result.items_deducted} items "
            f"({result.total_ingredients} ingredients), reason: {reason}"
        )
        return result
