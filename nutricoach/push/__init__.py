# -*- coding: utf-8 -*-
"""Push subscriptions and notification fan-out."""
