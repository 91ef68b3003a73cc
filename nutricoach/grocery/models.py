# -*- coding: utf-8 -*-
"""Grocery list — Pydantic models."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field


class GroceryListRequest(BaseModel):
    ingredients: List[str] = Field(default_factory=list, description="One ingredient text per meal")


class GroceryItem(BaseModel):
    name: str
    quantity: str = "as needed"
    unit: str = ""


class GroceryCategory(BaseModel):
    name: str
    items: List[GroceryItem] = Field(default_factory=list)


class GroceryList(BaseModel):
    categories: List[GroceryCategory] = Field(default_factory=list)
