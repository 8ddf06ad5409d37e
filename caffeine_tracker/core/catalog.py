"""
Beverage catalog.

Static reference table of typical caffeine content per serving.
"""

from typing import List, Optional, Sequence

from caffeine_tracker.storage.models import Beverage, BeverageCategory

COFFEE = BeverageCategory.COFFEE
OTHER = BeverageCategory.OTHER

# Fixed catalog - seeded reference data, not user editable
BEVERAGE_CATALOG: Sequence[Beverage] = (
    Beverage("americano", "Americano", 95, "☕", COFFEE),
    Beverage("cafe-latte", "Cafe Latte", 150, "☕", COFFEE),
    Beverage("espresso", "Espresso", 200, "☕", COFFEE),
    Beverage("cappuccino", "Cappuccino", 120, "☕", COFFEE),
    Beverage("cold-brew", "Cold Brew", 165, "☕", COFFEE),
    Beverage("cafe-mocha", "Cafe Mocha", 175, "☕", COFFEE),
    Beverage("vanilla-latte", "Vanilla Latte", 150, "☕", COFFEE),
    Beverage("caramel-macchiato", "Caramel Macchiato", 150, "☕", COFFEE),
    Beverage("cola", "Cola", 80, "🥤", OTHER),
    Beverage("green-tea", "Green Tea", 50, "🍵", OTHER),
    Beverage("chocolate", "Chocolate", 40, "🍫", OTHER),
    Beverage("black-tea", "Black Tea", 30, "🍵", OTHER),
    Beverage("energy-drink", "Energy Drink", 80, "⚡", OTHER),
    Beverage("cocoa", "Cocoa", 5, "☕", OTHER),
    Beverage("oolong-tea", "Oolong Tea", 30, "🍵", OTHER),
    Beverage("mate-tea", "Mate Tea", 85, "🍵", OTHER),
    Beverage("iced-tea", "Iced Tea", 25, "🧊", OTHER),
    Beverage("hot-chocolate", "Hot Chocolate", 5, "☕", OTHER),
)


def beverages_in_category(
    category: BeverageCategory,
    catalog: Sequence[Beverage] = BEVERAGE_CATALOG
) -> List[Beverage]:
    return [beverage for beverage in catalog if beverage.category == category]


def find_beverage(name: str, catalog: Sequence[Beverage] = BEVERAGE_CATALOG) -> Optional[Beverage]:
    """Return the first beverage whose name matches case-insensitively, or None."""
    wanted = name.strip().casefold()
    for beverage in catalog:
        if beverage.name.casefold() == wanted:
            return beverage
    return None


def search_beverages(query: str, catalog: Sequence[Beverage] = BEVERAGE_CATALOG) -> List[Beverage]:
    """Case-insensitive substring search on name or category.

    An empty query returns the whole catalog.
    """
    needle = query.strip().casefold()
    if not needle:
        return list(catalog)
    return [
        beverage for beverage in catalog
        if needle in beverage.name.casefold() or needle in beverage.category.value
    ]
