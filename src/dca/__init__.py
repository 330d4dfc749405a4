"""Docker color aliases: short docker / docker compose verbs."""

from __future__ import annotations

import os

__version__ = os.getenv("DCA_BUILD_VERSION", "2.0.0")
