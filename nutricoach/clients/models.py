# -*- coding: utf-8 -*-
"""Clients — Pydantic models."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class Gender(str, Enum):
    male = "male"
    female = "female"
    other = "other"


class ClientStatus(str, Enum):
    active = "active"
    inactive = "inactive"


class ClientUpsertRequest(BaseModel):
    id: Optional[str] = Field(None, min_length=1, description="Omit to create a new client")
    name: str = Field(..., min_length=1, max_length=128)
    email: Optional[str] = Field(None, max_length=256)
    age: Optional[int] = Field(None, ge=0, le=130)
    gender: Optional[Gender] = None
    goals: Optional[str] = Field(None, max_length=2000)
    height_cm: Optional[float] = Field(None, gt=0, le=300)
    last_weight_kg: Optional[float] = Field(None, gt=0, le=500)
    target_kcal: Optional[float] = Field(None, gt=0)
    status: ClientStatus = ClientStatus.active


class Client(BaseModel):
    id: str
    name: str
    email: Optional[str] = None
    age: Optional[int] = None
    gender: Optional[Gender] = None
    goals: Optional[str] = None
    height_cm: Optional[float] = None
    last_weight_kg: Optional[float] = None
    target_kcal: Optional[float] = None
    status: ClientStatus = ClientStatus.active
    created_at: str
    updated_at: str


class DailyLogRequest(BaseModel):
    log_date: str = Field(..., description="YYYY-MM-DD")
    weight_kg: Optional[float] = Field(None, gt=0, le=500)
    activity_minutes: Optional[float] = Field(None, ge=0)
    water_intake_l: Optional[float] = Field(None, ge=0)


class DailyLog(BaseModel):
    id: str
    client_id: str
    log_date: str
    weight_kg: Optional[float] = None
    activity_minutes: Optional[float] = None
    water_intake_l: Optional[float] = None
    created_at: str
