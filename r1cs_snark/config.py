"""
config.py
Default configuration and loader. Very small helper to override defaults via JSON files.
"""

import json
from pathlib import Path
from typing import Any, Dict

from .constraint_system import ConstraintSystem, OptimizationGoal, SynthesisMode, build

# Default constants used by the command line pipeline.
DEFAULT_CONFIG: Dict[str, Any] = {
    "synthesis_mode": "prove",           # "prove" records values, "setup" records the shape only
    "optimization_goal": "constraints",  # "constraints" inlines everything, "weight" outlines shared LCs
    "log_level": "INFO",
    "x": 3,                              # private input of the cube circuit
}


def load_config(path: str, base: Dict[str, Any] = None) -> Dict[str, Any]:
    """
    Load a JSON config file and merge it into base (shallow merge).

    :param path: path to JSON config file
    :param base: base configuration dictionary to update (if None use DEFAULT_CONFIG)
    :return: merged configuration dictionary
    """
    base = base.copy() if base is not None else DEFAULT_CONFIG.copy()
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with p.open("r", encoding="utf-8") as fh:
        data = json.load(fh)
    # shallow merge
    for k, v in data.items():
        base[k] = v
    return base


def build_from_config(circuit, config: Dict[str, Any] = None) -> ConstraintSystem:
    config = config if config is not None else DEFAULT_CONFIG
    return build(
        circuit,
        mode=SynthesisMode(config.get("synthesis_mode", "prove")),
        optimization_goal=OptimizationGoal(config.get("optimization_goal", "constraints")),
    )
