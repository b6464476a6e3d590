"""Discrete-event simulation of customers moving through a supermarket.

Customers arrive, pass the entrance, shop, and leave through one of three
checkout lanes (regular, express, self checkout). The engine advances a
simulated clock from event to event (three-phase A/B/C loop) and can be
paused, resumed, reset and slowed down for observation.

Front ends:
- `app run`: headless run or Tkinter control panel (`--gui`)
- `app serve`: MQTT service accepting control commands and publishing
  notifications/status (via a broker like Mosquitto)
"""

from .config import SimulationConfig
from .controller import SimulationController
from .engine import Engine, EngineState
from .model import StoreModel

__all__ = ["Engine", "EngineState", "SimulationConfig", "SimulationController", "StoreModel"]
