"""Marker strings recognized inside configuration documents."""

REF = "$ref"
REMOVE = "$remove"
REMOVE_FROM_LIST_PREFIX = "$remove::"
FORCE_STRING = "__forcestring__"
