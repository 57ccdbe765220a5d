from __future__ import annotations

import pytest
from PySide6.QtCore import QCoreApplication


@pytest.fixture(scope="session")
def qapp() -> QCoreApplication:
    """Single Qt application shared by tests that create timers."""
    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    return app
