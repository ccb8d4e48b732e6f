"""Message composer for log mailer.

Turns a batch of log events into one OutboundMessage: header, one body
fragment per event in batch order, and footer, concatenated without
separators. Address and subject fields are rendered once, against the last
event of the batch.

Version: 1.0.0
"""

from __future__ import annotations

from collections.abc import Sequence

from log_mailer.models.event import LogEvent
from log_mailer.models.message import OutboundMessage
from log_mailer.models.target_config import TargetConfig
from log_mailer.templates.renderer import Template


class MessageComposer:
    """Composes outbound messages from event batches.

    Stateless, so one instance may serve any number of threads; every call
    builds its own buffer. Each template renders with the renderer it was
    compiled by (see TargetConfigBuilder).
    """

    @staticmethod
    def _render(template: Template | None, event: LogEvent) -> str | None:
        if template is None:
            return None
        return template.render(event)

    def compose_body(self, events: Sequence[LogEvent], config: TargetConfig) -> str:
        """Concatenate header, per-event bodies and footer.

        Args:
            events: Non-empty batch of events.
            config: Target configuration.

        Returns:
            Body text.
        """
        last_event = events[-1]
        parts: list[str] = []

        if config.header is not None:
            parts.append(config.header.render(last_event))
        if config.body is not None:
            for event in events:
                parts.append(config.body.render(event))
        if config.footer is not None:
            parts.append(config.footer.render(last_event))

        return "".join(parts)

    def compose(
        self,
        events: Sequence[LogEvent] | None,
        config: TargetConfig,
    ) -> OutboundMessage | None:
        """Compose a message for a batch of events.

        Args:
            events: Ordered batch of events.
            config: Target configuration.

        Returns:
            The message, or None (skip) when the batch is empty or From, To
            or Subject is not configured. Skipping is silent.
        """
        if not events:
            return None
        if not config.can_send:
            return None

        last_event = events[-1]

        return OutboundMessage(
            from_=self._render(config.from_, last_event),
            to=self._render(config.to, last_event),
            cc=self._render(config.cc, last_event),
            bcc=self._render(config.bcc, last_event),
            subject=self._render(config.subject, last_event),
            body=self.compose_body(events, config),
            is_html=config.is_html,
            encoding=config.encoding,
        )


def compose(
    events: Sequence[LogEvent] | None,
    config: TargetConfig,
) -> OutboundMessage | None:
    """Compose a message with a throwaway composer.

    See :meth:`MessageComposer.compose`.
    """
    return MessageComposer().compose(events, config)
