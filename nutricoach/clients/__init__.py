# -*- coding: utf-8 -*-
"""Client registry and daily logs."""
