"""Adapters implementing the TaskNest repository ports."""
