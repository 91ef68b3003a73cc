# -*- coding: utf-8 -*-
"""Test package; points the app at a throwaway data root before any import."""

from __future__ import annotations

import os
import tempfile

_DATA_ROOT = tempfile.mkdtemp(prefix="nutricoach-test-")
os.environ.setdefault("NUTRICOACH_DATA_ROOT", _DATA_ROOT)
os.environ.setdefault("NUTRICOACH_DB_PATH", os.path.join(_DATA_ROOT, "nutricoach.db"))
os.environ.pop("OPENAI_API_KEY", None)
os.environ.pop("VAPID_PUBLIC_KEY", None)
os.environ.pop("VAPID_PRIVATE_KEY", None)
