"""Bastion: the command interpreter behind the Eternum Bastion console."""

__version__ = "0.1.0"
