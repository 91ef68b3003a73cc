# -*- coding: utf-8 -*-
"""Grocery list endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ..ai import get_ai_factory
from ..ai.client import AIClientFactory
from ..envelope import FunctionResult, FunctionRoute, ok
from .generator import generate_grocery_list
from .models import GroceryListRequest

functions = APIRouter(prefix="/api/functions", tags=["Functions"], route_class=FunctionRoute)


@functions.post("/generate-grocery-list", response_model=FunctionResult)
def generate_grocery_list_api(
    request: GroceryListRequest,
    ai_factory: AIClientFactory = Depends(get_ai_factory),
):
    grocery = generate_grocery_list(request.ingredients, ai=ai_factory(allow_mock=False))
    return ok(grocery.model_dump(mode="json"))
