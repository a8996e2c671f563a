"""
Services — External integration layer for ai-cli

- Client: OpenAI client construction, error translation, response
  normalization and bounded polling
"""

from .client import Poller, create_client, remote_errors, to_plain, status_of, RUN_ACTIVE, BATCH_ACTIVE

__all__ = [
    "Poller", "create_client", "remote_errors", "to_plain", "status_of",
    "RUN_ACTIVE", "BATCH_ACTIVE",
]
