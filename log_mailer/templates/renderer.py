"""Jinja2 template renderer for log mailer.

Compiles message templates once and renders them against log events.
Templates use ``${name}`` placeholders so layouts such as ``${message}`` or
``[${level}] ${logger}`` read the same as in other logging frameworks;
regular Jinja2 block tags and filters remain available.

Version: 2.0.0
"""

from __future__ import annotations

from datetime import datetime
from functools import lru_cache
from typing import TYPE_CHECKING, Any

from jinja2 import Environment, TemplateSyntaxError

from log_mailer.core.exceptions import TemplateRenderError
from log_mailer.core.logger import get_logger

if TYPE_CHECKING:
    from jinja2 import Template as JinjaTemplate

    from log_mailer.models.event import LogEvent

logger = get_logger(__name__)


class Template:
    """A named format string bound to a compiled Jinja2 template.

    Semantically a pure function ``(event) -> str``. Instances are immutable
    and safe to render from several threads at once.
    """

    __slots__ = ("_name", "_text", "_compiled")

    def __init__(
        self,
        text: str,
        name: str | None = None,
        renderer: TemplateRenderer | None = None,
    ) -> None:
        """Compile a template.

        Args:
            text: Format string, e.g. ``"${longdate} ${message}"``.
            name: Template name used in error messages (e.g. "subject").
            renderer: Renderer whose environment compiles the text
                (uses the shared default renderer if None).

        Raises:
            TemplateRenderError: If the text is not a valid template.
        """
        renderer = renderer or get_default_renderer()
        object.__setattr__(self, "_name", name)
        object.__setattr__(self, "_text", text)
        object.__setattr__(self, "_compiled", renderer.compile(text, name))

    def __setattr__(self, key: str, value: Any) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    @property
    def name(self) -> str | None:
        return self._name

    @property
    def text(self) -> str:
        return self._text

    def render(self, event: LogEvent) -> str:
        """Render this template against an event's context.

        Raises:
            TemplateRenderError: If rendering fails (e.g. a filter rejects its input).
        """
        try:
            return self._compiled.render(event.context())
        except Exception as e:
            raise TemplateRenderError(
                f"Failed to render {self._name or 'template'}: {e}",
                template_name=self._name,
            ) from e

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Template):
            return NotImplemented
        return self._text == other._text and self._name == other._name

    def __hash__(self) -> int:
        return hash((self._name, self._text))

    def __repr__(self) -> str:
        return f"Template(name={self._name!r}, text={self._text!r})"

    def __str__(self) -> str:
        return self._text


class TemplateRenderer:
    """Jinja2 environment wrapper used to compile and render templates."""

    def __init__(self, autoescape: bool = False) -> None:
        """Initialize template renderer.

        Args:
            autoescape: HTML-escape rendered values. Off by default because
                layouts usually produce plain text.

        Raises:
            TemplateRenderError: If the Jinja2 environment cannot be created.
        """
        try:
            self.env = self._init_jinja_env(autoescape)
            logger.debug("Template renderer initialized")
        except Exception as e:
            logger.error(f"Failed to initialize template renderer: {e}")
            raise TemplateRenderError(f"Failed to initialize Jinja2: {e}") from e

    def _init_jinja_env(self, autoescape: bool) -> Environment:
        """Initialize Jinja2 environment with layout-style delimiters."""
        env = Environment(
            variable_start_string="${",
            variable_end_string="}",
            autoescape=autoescape,
            keep_trailing_newline=True,
        )

        env.filters["format_date"] = self._format_date
        env.filters["format_time"] = self._format_time

        return env

    def compile(self, text: str, name: str | None = None) -> JinjaTemplate:
        """Compile template text.

        Args:
            text: Format string.
            name: Template name for error reporting.

        Returns:
            Compiled Jinja2 template.

        Raises:
            TemplateRenderError: If the text has a syntax error.
        """
        try:
            return self.env.from_string(text)
        except TemplateSyntaxError as e:
            logger.error(f"Invalid template {name or text!r}: {e}")
            raise TemplateRenderError(
                f"Invalid template {name or text!r}: {e}",
                template_name=name,
            ) from e

    def render(self, template: Template, event: LogEvent) -> str:
        """Render ``template`` against ``event``.

        Args:
            template: Compiled template.
            event: Log event supplying the context.

        Returns:
            Rendered text.
        """
        return template.render(event)

    def template(self, text: str | None, name: str | None = None) -> Template | None:
        """Build a Template bound to this renderer, passing None through."""
        if text is None:
            return None
        return Template(text, name=name, renderer=self)

    @staticmethod
    def _format_date(value: Any, fmt: str = "%Y-%m-%d") -> str:
        """Jinja2 filter to format datetimes (strings pass through)."""
        if isinstance(value, datetime):
            return value.strftime(fmt)
        return str(value)

    @staticmethod
    def _format_time(value: Any, fmt: str = "%H:%M:%S") -> str:
        """Jinja2 filter to format times (strings pass through)."""
        if isinstance(value, datetime):
            return value.strftime(fmt)
        return str(value)


@lru_cache(maxsize=1)
def get_default_renderer() -> TemplateRenderer:
    """Return the process-wide default renderer."""
    return TemplateRenderer()
