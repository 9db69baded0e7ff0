"""Service modules"""
from .scenario import AccountSnapshot, ScenarioRunner, StepResult, System, build_system, load_scenario

__all__ = [
    "AccountSnapshot",
    "ScenarioRunner",
    "StepResult",
    "System",
    "build_system",
    "load_scenario",
]
