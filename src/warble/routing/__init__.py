"""Routing — component API routes, request dispatch, and client attributes.

Routes are declared per component, compiled once per definition, and
collected into a ``Router`` in registration order.
"""
