"""gridcity-signal - Change notification for the city simulation."""
from __future__ import annotations

from gridcity_signal.notifier import ChangeNotifier, Observer

__all__ = ["ChangeNotifier", "Observer"]
