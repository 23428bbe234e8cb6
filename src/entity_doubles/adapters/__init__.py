"""Adapters that turn resolver blueprints into concrete doubles."""
