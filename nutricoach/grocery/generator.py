# -*- coding: utf-8 -*-
"""Grocery list generation."""

from __future__ import annotations

import logging
from typing import Sequence

from pydantic import ValidationError

from ..ai import AIClient, parse_model_json
from ..errors import AIProviderError, AIQuotaExceeded, AIRateLimited, InvalidRequest, UpstreamError
from .models import GroceryList

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are a grocery list assistant. Given ingredients from multiple meals, you need to:

1. Parse each ingredient to identify: item name, quantity, and unit
2. Consolidate duplicate items (e.g., "2 tomatoes" + "3 tomatoes" = "5 tomatoes")
3. If quantities cannot be consolidated (different units or unclear), list them separately
4. Categorize items into these categories ONLY:
   - Produce (fruits, vegetables)
   - Proteins (meat, fish, eggs, tofu)
   - Dairy (milk, cheese, yogurt)
   - Grains (rice, bread, pasta, cereals)
   - Spices & Seasonings
   - Pantry (oils, sauces, canned goods)
   - Other

5. Return ONLY a valid JSON object with this exact structure:
{
  "categories": [
    {
      "name": "Category Name",
      "items": [
        { "name": "Item name", "quantity": "5", "unit": "pieces" }
      ]
    }
  ]
}

IMPORTANT:
- Keep quantities practical for shopping
- Use common units (g, kg, ml, L, pieces, cups, tbsp, tsp)
- If an ingredient doesn't specify quantity, use "as needed"
- Be smart about consolidation (don't combine if units are incompatible)
- Return ONLY the JSON, no additional text or markdown"""


def generate_grocery_list(ingredients: Sequence[str], *, ai: AIClient) -> GroceryList:
    items = [str(i).strip() for i in ingredients if str(i).strip()]
    if not items:
        raise InvalidRequest("No ingredients provided")

    ingredients_text = "\n".join(f"Meal {idx}: {text}" for idx, text in enumerate(items, start=1))
    logger.info("Requesting grocery list for %d ingredient sets", len(items))
    try:
        raw = ai.chat(
            [
                {"role": "system", "content": SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": f"Parse and organize these ingredients into a consolidated grocery list:\n\n{ingredients_text}",
                },
            ]
        )
    except AIProviderError as exc:
        if exc.provider_status == 429:
            raise AIRateLimited() from exc
        if exc.provider_status == 402:
            raise AIQuotaExceeded() from exc
        raise

    try:
        grocery = GroceryList.model_validate(parse_model_json(raw))
    except (ValueError, ValidationError) as exc:
        logger.error("Failed to parse grocery list response: %s", (raw or "")[:200])
        raise UpstreamError("Failed to parse AI response as JSON") from exc

    logger.info("Generated grocery list with %d categories", len(grocery.categories))
    return grocery
