# -*- coding: utf-8 -*-
"""Message template rendering."""

from __future__ import annotations

import re
from typing import Any, Mapping


def render_template(template: str, variables: Mapping[str, Any] | None = None) -> str:
    """Substitute every ``{key}`` occurrence with ``str(value)``.

    Placeholders without a matching variable stay in the text unchanged.
    """
    content = template
    for key, value in (variables or {}).items():
        content = re.sub(r"\{" + re.escape(str(key)) + r"\}", lambda _m: str(value), content)
    return content
