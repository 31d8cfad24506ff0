"""
App configuration for the License Service project.
"""

import logging
import os
import sys

from django.apps import AppConfig

logger = logging.getLogger(__name__)

# Management commands that never serve traffic
_SKIP_COMMANDS = [
    "migrate",
    "makemigrations",
    "collectstatic",
    "shell",
    "check",
    "createsuperuser",
]


class LicenseServiceConfig(AppConfig):
    """App configuration for LicenseService."""

    name = "LicenseService"
    verbose_name = "License Service"

    def ready(self):
        """Wire observability and domain event handlers once apps are loaded."""
        # Event handlers are needed everywhere, including tests and commands
        from core.infrastructure.event_handlers import register_event_handlers

        register_event_handlers()

        if len(sys.argv) > 1 and sys.argv[1] in _SKIP_COMMANDS:
            return

        # Django's autoreloader runs the project twice
        if os.environ.get("RUN_MAIN") == "false":
            return

        if os.environ.get("OTEL_ENABLED", "false").lower() != "true":
            return

        if not getattr(self, "_initialized", False):
            logger.info("Setting up observability...")
            self.setup_observability()
            self._initialized = True

    def setup_observability(self):
        """Setup OpenTelemetry after apps are ready."""
        from core.instrumentation import setup_opentelemetry

        try:
            setup_opentelemetry()
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.warning("Failed to setup OpenTelemetry: %s", e)
