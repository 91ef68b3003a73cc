# -*- coding: utf-8 -*-
"""
Client workflow module

Tracks each client's stage, manual stage triggers, scheduled actions and the soft retargeting sweep.
"""

from .automation import process_workflow_automation
from .retargeting import run_retargeting_sweep
from .stages import trigger_workflow_stage

__all__ = [
    'process_workflow_automation',
    'run_retargeting_sweep',
    'trigger_workflow_stage',
]
