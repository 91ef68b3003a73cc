# -*- coding: utf-8 -*-
"""
Review cards

AI-drafted cards, the pending-review queue and delivery to clients.
"""
