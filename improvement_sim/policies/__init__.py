"""
Policy module: registry, abstract base class, and public API for correction policies.

This module provides:
- An abstract base class (`CorrectionPolicy`) for all correction strategies.
- A registry keyed by strategy name for lookup from run modes and the CLI.

Usage Example:
--------------

from improvement_sim.policies import get_policy, register_policy, CorrectionPolicy

@register_policy
class MyPolicy(CorrectionPolicy):
    strategy = "mine"

    def evaluate(self, tick, raw_position, ideal):
        return raw_position, None

policy = get_policy("mine")(cfg)
committed, event = policy.evaluate(tick, raw_position, cfg.ideal_position)
"""
from __future__ import annotations

import inspect
from abc import ABC, abstractmethod
from typing import Dict, Optional, Tuple, Type

from ..config import SimulationConfig
from ..simulator.records import AdjustmentEvent

__all__ = [
    "CorrectionPolicy",
    "register_policy",
    "get_policy",
    "available_policies",
    "correct_toward",
]

# Policy registry: maps strategy names to classes
_REGISTRY: Dict[str, Type["CorrectionPolicy"]] = {}

Evaluation = Tuple[float, Optional[AdjustmentEvent]]


class CorrectionPolicy(ABC):
    """
    Abstract interface every correction strategy must implement.
    Policies hold no state across ticks beyond their configuration.
    """

    strategy: str = ""

    def __init__(self, cfg: SimulationConfig):
        self.cfg = cfg

    @abstractmethod
    def evaluate(self, tick: int, raw_position: float, ideal: float, /) -> Evaluation:
        """
        Decide whether to correct at ``tick``.
        Returns the committed position and the applied adjustment, if any.
        """

    @property
    def name(self) -> str:
        """Name used in reports and logs (defaults to the strategy name)."""
        return self.strategy or self.__class__.__name__


def correct_toward(tick: int, raw_position: float, ideal: float, strength: float) -> Evaluation:
    """Remove ``strength`` of the deviation from ideal and record the event."""
    correction = (raw_position - ideal) * strength
    committed = raw_position - correction
    return committed, AdjustmentEvent(tick=tick, resulting_position=committed, correction_amount=correction)


# ------------------------------------------------------------------
# Registry helpers
# ------------------------------------------------------------------

def register_policy(cls: Type["CorrectionPolicy"]) -> Type["CorrectionPolicy"]:
    """
    Class decorator to auto-register policies under their ``strategy`` name.
    Raises if duplicate or invalid registration is attempted.
    """
    if not inspect.isclass(cls):
        raise TypeError("@register_policy can only decorate classes")
    if not issubclass(cls, CorrectionPolicy):
        raise TypeError("Registered class must inherit from CorrectionPolicy")
    if not cls.strategy:
        raise TypeError(f"{cls.__name__} must define a non-empty 'strategy' name")

    key = cls.strategy
    if key in _REGISTRY:
        raise KeyError(f"Policy '{key}' is already registered")
    _REGISTRY[key] = cls
    return cls


def get_policy(name: str) -> Type["CorrectionPolicy"]:
    """
    Retrieve a policy class by strategy name.
    Raises KeyError if not found.
    """
    try:
        return _REGISTRY[name]
    except KeyError as exc:
        raise KeyError(
            f"Policy '{name}' not found in registry. Available: {list(_REGISTRY)}"
        ) from exc


def available_policies() -> Tuple[str, ...]:
    return tuple(_REGISTRY)


# ------------------------------------------------------------------
# Import built-in policies so they register themselves
# ------------------------------------------------------------------

from . import continuous  # noqa: E402
from . import continual  # noqa: E402
