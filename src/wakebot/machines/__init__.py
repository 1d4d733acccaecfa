"""Fly.io Machines control-plane client and models."""

from wakebot.machines.client import MachinesClient
from wakebot.machines.models import MachineDescription, MachineTarget

__all__ = ["MachineDescription", "MachineTarget", "MachinesClient"]
