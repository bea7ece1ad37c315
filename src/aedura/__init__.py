"""Signup and session service for Aedura contributors and advisory-board members."""

from .api import app

__all__ = ["app"]
