"""Protocol definitions for the release pipeline's external collaborators."""

from .builder_protocol import BuilderProtocol
from .publisher_protocol import PublisherProtocol


__all__ = ["BuilderProtocol", "PublisherProtocol"]
