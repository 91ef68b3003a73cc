# -*- coding: utf-8 -*-
"""Nutrition-coaching workflow service."""

__version__ = "0.1.0"
