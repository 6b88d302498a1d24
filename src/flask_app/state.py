from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class AppState:
    # Lifecycle
    init_state: str = "Not Started"
    init_error: Optional[str] = None
    init_lock: threading.Lock = field(default_factory=threading.Lock)
    init_started: bool = False

    # Runtime
    db_sde: Any = None
    calculator: Any = None


state = AppState()
