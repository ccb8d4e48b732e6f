"""Templates module for log mailer.

Contains Jinja2 template compilation and rendering.

Author: Odiseo
Created: 2025-10-18
Version: 1.0.0
"""

from log_mailer.templates.renderer import (
    Template,
    TemplateRenderer,
    get_default_renderer,
)

__all__ = ["Template", "TemplateRenderer", "get_default_renderer"]
