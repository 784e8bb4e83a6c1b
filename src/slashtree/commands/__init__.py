"""
Runtime command loading: compiled modules, the command tree, registration.
"""

from slashtree.commands.loader import CommandModuleLoader
from slashtree.commands.registration import build_registration_payload, post_commands
from slashtree.commands.tree import CommandImporter, CommandTree, RootCommandNode, SubCommandNode

__all__ = [
    "CommandImporter",
    "CommandModuleLoader",
    "CommandTree",
    "RootCommandNode",
    "SubCommandNode",
    "build_registration_payload",
    "post_commands",
]
