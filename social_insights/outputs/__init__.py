"""Output handlers for insights delivery."""

from .markdown import MarkdownReport, render_markdown
from .web_api import create_app, DashboardState

__all__ = ["MarkdownReport", "render_markdown", "create_app", "DashboardState"]
