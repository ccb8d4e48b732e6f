"""Mail target - composes log event batches and dispatches them over SMTP.

Ties together the message composer and the transport selected for the
probed capability tier. A target holds only immutable state, so a single
instance may be written to from several producer threads at once.

Version: 2.0.0
"""

from __future__ import annotations

from collections.abc import Sequence

from log_mailer.clients.capability import probe_capabilities
from log_mailer.clients.smtp import Transport, create_transport
from log_mailer.composer.message import MessageComposer
from log_mailer.config.settings import MailSettings
from log_mailer.core.logger import get_logger
from log_mailer.models.event import LogEvent
from log_mailer.models.target_config import TargetConfig
from log_mailer.templates.renderer import Template, TemplateRenderer

logger = get_logger(__name__)


class MailTarget:
    """Sends log events by email using SMTP.

    Each ``write_batch`` call produces at most one email whose body holds one
    rendered fragment per event. Pair with :class:`MailHandler` to collect
    several records into one message.

    Example:
        settings = MailSettings()
        target = MailTarget.from_settings(settings)
        target.write(LogEvent(message="disk almost full", level="WARNING"))
    """

    def __init__(
        self,
        config: TargetConfig,
        transport: Transport | None = None,
    ) -> None:
        """Initialize mail target.

        Args:
            config: Immutable target configuration.
            transport: Transport to send with (created from the probed
                capabilities if None).
        """
        self.config = config
        self.transport = transport or create_transport(probe_capabilities())
        self.composer = MessageComposer()

        logger.debug(
            f"Mail target initialized: {config.smtp_server}:{config.smtp_port} "
            f"({self.transport.capabilities.tier.value} tier)"
        )

    @classmethod
    def from_settings(
        cls,
        settings: MailSettings | None = None,
        renderer: TemplateRenderer | None = None,
    ) -> MailTarget:
        """Build a target from environment settings.

        Probes the transport capabilities, builds the configuration through
        the capability-checking builder and selects the transport.

        Args:
            settings: Loaded settings (reads the environment if None).
            renderer: Renderer the templates are compiled with (the shared
                default if None).

        Raises:
            CapabilityError: If a privileged setting is unsupported.
            MailConfigError: If the configuration is incomplete.
        """
        settings = settings or MailSettings()
        capabilities = probe_capabilities(settings.TRANSPORT_TIER)
        config = settings.build_target_config(capabilities, renderer=renderer)
        return cls(config, transport=create_transport(capabilities))

    def layouts(self) -> list[Template]:
        """Return every template used by this target."""
        return self.config.layouts()

    def write(self, event: LogEvent) -> bool:
        """Send a single event. See :meth:`write_batch`."""
        return self.write_batch([event])

    def write_batch(self, events: Sequence[LogEvent] | None) -> bool:
        """Compose and send one email for a batch of events.

        Args:
            events: Ordered batch of events.

        Returns:
            True if a message was handed to the transport, False when the
            batch was empty or From, To or Subject is not configured.

        Raises:
            TransportError: If the SMTP exchange fails. Nothing is retried.
            TemplateRenderError: If a template fails to render.
        """
        message = self.composer.compose(events, self.config)
        if message is None:
            return False

        self.transport.send(message, self.config)
        return True
