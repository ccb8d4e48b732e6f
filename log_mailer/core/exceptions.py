"""Custom exceptions for log mailer.

Defines specific exception types for configuration, capability, template and
transport failures to enable precise error handling and logging.

Author: Odiseo
Created: 2025-10-18
Version: 1.0.0
"""


class LogMailerError(Exception):
    """Base exception for all log mailer errors.

    Serves as the parent class for all custom exceptions in the package,
    allowing consumers to catch all mail-target errors with a single except block.

    Example:
        try:
            target.write_batch(events)
        except LogMailerError as e:
            logger.error(f"Log mailer error: {e}")
    """

    pass


class MailConfigError(LogMailerError):
    """Exception raised for configuration errors.

    Indicates invalid or missing configuration in MailSettings or in the
    target configuration builder.

    Example:
        raise MailConfigError("SMTP server is not configured")
    """

    pass


class CapabilityError(MailConfigError):
    """Exception raised when a privileged property is not supported.

    Raised synchronously at the moment the property is assigned, never
    deferred to the first send.

    Attributes:
        property_name (str): Name of the rejected property.

    Example:
        raise CapabilityError("smtp_port")
    """

    def __init__(self, property_name: str, message: str | None = None):
        """Initialize capability error.

        Args:
            property_name: Name of the unsupported property.
            message: Optional error description.
        """
        super().__init__(
            message
            or f"Parameter {property_name} isn't supported by the active SMTP transport."
        )
        self.property_name = property_name


class TransportError(LogMailerError):
    """Exception raised for SMTP connection/delivery failures.

    Indicates problems with SMTP connection, authentication, or the protocol
    exchange. The original exception is chained as ``__cause__``.

    Attributes:
        is_transient (bool): Whether error is temporary (a later send may succeed).

    Example:
        raise TransportError(
            "Connection refused by smtp.example.com:25",
            is_transient=True
        )
    """

    def __init__(self, message: str, is_transient: bool = False):
        """Initialize transport error.

        Args:
            message: Error description.
            is_transient: Whether error is temporary.
        """
        super().__init__(message)
        self.is_transient = is_transient


class TemplateRenderError(LogMailerError):
    """Exception raised when a template fails to compile or to render.

    Attributes:
        template_name (str, optional): Name of the template that failed.

    Example:
        raise TemplateRenderError(
            "unexpected end of template",
            template_name="subject"
        )
    """

    def __init__(self, message: str, template_name: str | None = None):
        """Initialize template render error.

        Args:
            message: Error description.
            template_name: Optional name of the template that failed.
        """
        super().__init__(message)
        self.template_name = template_name
