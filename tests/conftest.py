"""Shared fixtures: sample descriptions and a loader for generated modules."""
from __future__ import annotations

import importlib.util
import sys
import uuid

import pytest

DOOR_SPEC = """
States { Open, Close }

InitialState(Open)

Events { Turn }

Transitions {
    Turn [Open => Close, Close => Open, Close => Close],
}
"""

LOCK_SPEC = """
Context = dict;

States { Open, Close, Locked }

InitialState(Open)

Events { Turn, Lock, Kick }

Transitions {
    Turn [Open => Close, Close => Open],
    Lock [Close => Locked],
}
"""

FLAT_SPEC = """
States { Open, Close }
InitialState(Open)
Events { Turn }

Turn [Open => Close, Close => Open] {
    self.turns += 1
}
"""


@pytest.fixture
def load_generated(tmp_path):
    """Import generated source as a real module so dataclasses can resolve it."""
    loaded = []

    def load(source: str):
        name = f"generated_fsm_{uuid.uuid4().hex}"
        path = tmp_path / f"{name}.py"
        path.write_text(source, encoding="utf-8")
        spec = importlib.util.spec_from_file_location(name, path)
        module = importlib.util.module_from_spec(spec)
        sys.modules[name] = module
        loaded.append(name)
        spec.loader.exec_module(module)
        return module

    yield load

    for name in loaded:
        sys.modules.pop(name, None)
