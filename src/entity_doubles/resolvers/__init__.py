"""Builders producing resolver maps for entity, field list and field item doubles."""
