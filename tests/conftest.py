from __future__ import annotations

import os

import pytest


@pytest.fixture(autouse=True)
def _isolate_betanet_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    # Overlay tests read os.environ at the boundary; stray BETANET_* values from
    # the developer shell would leak into them.
    for name in list(os.environ):
        if name.startswith("BETANET_"):
            monkeypatch.delenv(name, raising=False)
