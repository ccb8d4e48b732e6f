"""Command-line tools for log mailer."""
