"""Transmission agent module."""

from .agent import Agent, ITransmitter

__all__ = ["Agent", "ITransmitter"]
