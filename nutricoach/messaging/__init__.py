# -*- coding: utf-8 -*-
"""Client messages and named message templates."""
