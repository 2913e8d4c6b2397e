"""Middleware — callables wrapped around request dispatch."""

from waypoint.middleware.protocol import Middleware, Next

__all__ = ["Middleware", "Next"]
