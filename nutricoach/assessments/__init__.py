# -*- coding: utf-8 -*-
"""Client assessment requests and form intake."""
