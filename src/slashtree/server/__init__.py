"""HTTP surface: the interactions endpoint and signature verification."""

from slashtree.server.app import InteractionEndpoint, create_app
from slashtree.server.verify import verify_key

__all__ = ["InteractionEndpoint", "create_app", "verify_key"]
