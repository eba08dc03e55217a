import argparse
import importlib.util
import sys
from collections.abc import Callable
from pathlib import Path
from types import ModuleType

import pytest

GENERATOR_DIR = Path(__file__).resolve().parent.parent
if str(GENERATOR_DIR) not in sys.path:
    sys.path.insert(0, str(GENERATOR_DIR))

import decorate  # noqa: E402

CONTRACTS_SOURCE = '''\
from typing import Protocol, runtime_checkable


@runtime_checkable
class Vehicle(Protocol):
    def title(self) -> str: ...


@runtime_checkable
class Soc(Protocol):
    def soc(self) -> float: ...


@runtime_checkable
class Range(Protocol):
    def range(self) -> int: ...


@runtime_checkable
class Odometer(Protocol):
    def odometer(self) -> float: ...


@runtime_checkable
class Climater(Protocol):
    def climater(self, target: float, unit: str) -> bool: ...
'''

VEHICLE_TYPES = {
    "api.Soc": "api.Soc,soc,Callable[[], float]",
    "api.Range": "api.Range,range,Callable[[], int]",
    "api.Odometer": "api.Odometer,odometer,Callable[[], float]",
    "api.Climater": "api.Climater,climater,Callable[[float, str], bool]",
}


class Car:
    """Plain base value implementing only api.Vehicle."""

    def title(self) -> str:
        return "car"


@pytest.fixture
def make_args() -> Callable[..., argparse.Namespace]:
    def _make_args(**overrides: object) -> argparse.Namespace:
        base_args: dict[str, object] = {
            "out": None,
            "package": "vehicle",
            "function": "decorate",
            "base": "api.Vehicle",
            "api": None,
            "types": [VEHICLE_TYPES["api.Soc"], VEHICLE_TYPES["api.Range"]],
            "list_combinations": False,
        }
        base_args.update(overrides)
        return argparse.Namespace(**base_args)

    return _make_args


@pytest.fixture
def make_table() -> Callable[..., decorate.CapabilityTable]:
    def _make_table(
        *type_names: str,
        base: str = "api.Vehicle",
        api_module: str | None = None,
    ) -> decorate.CapabilityTable:
        records = [
            decorate.parse_capability_record(VEHICLE_TYPES[name]) for name in type_names
        ]
        return decorate.build_capability_table(base, records, api_module)

    return _make_table


@pytest.fixture
def contracts(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> ModuleType:
    path = tmp_path / "api.py"
    path.write_text(CONTRACTS_SOURCE, encoding="utf-8")
    spec = importlib.util.spec_from_file_location("api", path)
    assert spec is not None and spec.loader is not None
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    monkeypatch.setitem(sys.modules, "api", module)
    return module


@pytest.fixture
def load_generated(
    contracts: ModuleType, tmp_path: Path
) -> Callable[[str], ModuleType]:
    def _load_generated(source: str) -> ModuleType:
        path = tmp_path / "generated_decorators.py"
        path.write_text(source, encoding="utf-8")
        spec = importlib.util.spec_from_file_location("generated_decorators", path)
        assert spec is not None and spec.loader is not None
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        return module

    return _load_generated


@pytest.fixture
def car() -> Car:
    return Car()
