"""Example contracts for a vehicle integration.

Vehicle is the mandatory base contract; every other protocol is an optional
capability a concrete vehicle may or may not provide.
"""

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
