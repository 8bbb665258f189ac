"""Lookup of flows by name."""

from __future__ import annotations

from .base import FlowDefinition

_FLOWS: dict[str, FlowDefinition] = {}


def register_flow(flow: FlowDefinition) -> FlowDefinition:
    """Add ``flow`` to the registry; names must be unique."""
    existing = _FLOWS.get(flow.name)
    if existing is not None and existing is not flow:
        raise ValueError(f"flow {flow.name!r} is already registered")
    _FLOWS[flow.name] = flow
    return flow


def get_flow(name: str) -> FlowDefinition:
    try:
        return _FLOWS[name]
    except KeyError:
        raise KeyError(f"unknown flow: {name}") from None


def list_flows() -> list[FlowDefinition]:
    return [_FLOWS[name] for name in sorted(_FLOWS)]


__all__ = ["get_flow", "list_flows", "register_flow"]
