"""
Food Image Resolver

Maps menu item names to display images. Used by the cart when an item is
added; a miss just leaves the line without a resolved image.

Matching order:
    1. Case-insensitive exact match on a table key
    2. Substring containment in either direction
    3. Any shared significant word (> 3 characters, substring either way)
"""

import re
from typing import Optional

IMAGE_BASE_PATH = "/assets/food"

# Exact names first, then shorter variations. Order matters for fuzzy matches.
FOOD_IMAGE_MAP: dict[str, str] = {
    "BBQ Bacon Burger": f"{IMAGE_BASE_PATH}/bbq-bacon-burger.jpg",
    "Buffalo Wings": f"{IMAGE_BASE_PATH}/buffalo-wings.jpg",
    "Crispy Imperial Rolls": f"{IMAGE_BASE_PATH}/crispy-imperial-rolls.jpg",
    "Fresh Spring Rolls": f"{IMAGE_BASE_PATH}/fresh-spring-rolls.jpg",
    "Garlic Knots": f"{IMAGE_BASE_PATH}/garlic-knots.jpg",
    "Lemongrass Beef Banh Mi": f"{IMAGE_BASE_PATH}/lemongrass-beef-banh-mi.jpg",
    "Margherita Pizza": f"{IMAGE_BASE_PATH}/margherita-pizza.png",
    "Mozzarella Sticks": f"{IMAGE_BASE_PATH}/mozzarella-sticks.jpg",
    "Mushroom Swiss Burger": f"{IMAGE_BASE_PATH}/mushroom-swiss.jpg",
    "Onion Rings": f"{IMAGE_BASE_PATH}/onion-rings.jpg",
    "Pappi's Supreme": f"{IMAGE_BASE_PATH}/pappis-supreme.png",
    "Pho Bo": f"{IMAGE_BASE_PATH}/pho-bo.jpg",
    "Pho Ga": f"{IMAGE_BASE_PATH}/pho-ga.jpg",
    "Vermicelli Bowl": f"{IMAGE_BASE_PATH}/vermicelli-bowl.jpg",
    "The Cheeky's Classic": f"{IMAGE_BASE_PATH}/the-cheekys-classic.jpg",
    "Crispy Fries": f"{IMAGE_BASE_PATH}/crispy-fries.jpg",
    "Loaded Nachos": f"{IMAGE_BASE_PATH}/loaded-nachos.jpg",

    # Additional name variations
    "BBQ Bacon": f"{IMAGE_BASE_PATH}/bbq-bacon-burger.jpg",
    "Bacon Burger": f"{IMAGE_BASE_PATH}/bbq-bacon-burger.jpg",
    "Wings": f"{IMAGE_BASE_PATH}/buffalo-wings.jpg",
    "Imperial Rolls": f"{IMAGE_BASE_PATH}/crispy-imperial-rolls.jpg",
    "Spring Rolls": f"{IMAGE_BASE_PATH}/fresh-spring-rolls.jpg",
    "Garlic Bread": f"{IMAGE_BASE_PATH}/garlic-knots.jpg",
    "Banh Mi": f"{IMAGE_BASE_PATH}/lemongrass-beef-banh-mi.jpg",
    "Margherita": f"{IMAGE_BASE_PATH}/margherita-pizza.png",
    "Mozzarella": f"{IMAGE_BASE_PATH}/mozzarella-sticks.jpg",
    "Mushroom Swiss": f"{IMAGE_BASE_PATH}/mushroom-swiss.jpg",
    "Mushroom Burger": f"{IMAGE_BASE_PATH}/mushroom-swiss.jpg",
    "Supreme Pizza": f"{IMAGE_BASE_PATH}/pappis-supreme.png",
    "Supreme": f"{IMAGE_BASE_PATH}/pappis-supreme.png",
    "Beef Pho": f"{IMAGE_BASE_PATH}/pho-bo.jpg",
    "Chicken Pho": f"{IMAGE_BASE_PATH}/pho-ga.jpg",
    "Vermicelli": f"{IMAGE_BASE_PATH}/vermicelli-bowl.jpg",
    "Classic Burger": f"{IMAGE_BASE_PATH}/the-cheekys-classic.jpg",
    "Cheeky's Classic": f"{IMAGE_BASE_PATH}/the-cheekys-classic.jpg",
    "Fries": f"{IMAGE_BASE_PATH}/crispy-fries.jpg",
    "French Fries": f"{IMAGE_BASE_PATH}/crispy-fries.jpg",
    "Nachos": f"{IMAGE_BASE_PATH}/loaded-nachos.jpg",
}

SIGNIFICANT_WORD_LENGTH = 3


def get_food_image(food_name: Optional[str]) -> Optional[str]:
    """
    Resolve a display image for a menu item name.

    Args:
        food_name: Menu item name as shown in the catalog

    Returns:
        Image reference, or None if nothing matches
    """
    if not food_name or not food_name.strip():
        return None

    normalized = food_name.strip().lower()

    for key, image in FOOD_IMAGE_MAP.items():
        if key.lower() == normalized:
            return image

    food_words = re.split(r"\s+", normalized)

    for key, image in FOOD_IMAGE_MAP.items():
        key_lower = key.lower()

        if key_lower in normalized or normalized in key_lower:
            return image

        for food_word in food_words:
            if len(food_word) <= SIGNIFICANT_WORD_LENGTH:
                continue
            for key_word in key_lower.split():
                if len(key_word) <= SIGNIFICANT_WORD_LENGTH:
                    continue
                if food_word in key_word or key_word in food_word:
                    return image

    return None


def get_all_food_images() -> list[dict[str, str]]:
    """List every name → image pair (admin image picker)."""
    return [{"name": name, "image": image} for name, image in FOOD_IMAGE_MAP.items()]
