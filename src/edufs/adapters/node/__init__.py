"""CAS node adapters."""

from edufs.adapters.node.factory import create_node
from edufs.adapters.node.kubo import KuboNode
from edufs.adapters.node.local import LocalNode


__all__ = ["KuboNode", "LocalNode", "create_node"]
