"""Profiles module — Profile model, directory and admin service."""

from leavedesk.profiles.directory import ProfileDirectory
from leavedesk.profiles.models import Profile

__all__ = ["Profile", "ProfileDirectory"]
