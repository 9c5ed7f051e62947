"""Terminal viewer for stored reviews."""

from diffstory.viewer.filter import FilterLevel
from diffstory.viewer.follow import follow
from diffstory.viewer.render import render_review

__all__ = ["FilterLevel", "follow", "render_review"]
