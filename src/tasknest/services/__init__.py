"""Service layer for TaskNest."""
