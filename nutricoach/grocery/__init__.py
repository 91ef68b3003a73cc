# -*- coding: utf-8 -*-
"""Consolidated grocery lists from meal ingredients."""
