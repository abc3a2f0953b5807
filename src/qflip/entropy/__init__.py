"""Entropy acquisition subsystem for qflip.

Re-exports the buffer type, the ABC, the registry, the source chain and
all built-in source implementations::

    from qflip.entropy import EntropyBuffer, SourceChain, build_source_chain
    from qflip.entropy import QRandomSource, AnuQrngSource, SystemEntropySource
"""

from qflip.entropy.anu import AnuQrngSource
from qflip.entropy.base import EntropySource
from qflip.entropy.buffer import EntropyBuffer
from qflip.entropy.chain import SourceChain, SourceDescriptor, build_source_chain
from qflip.entropy.qrandom import QRandomSource
from qflip.entropy.registry import available_sources, register_entropy_source
from qflip.entropy.saved import SavedEntropySource
from qflip.entropy.system import SystemEntropySource
from qflip.entropy.user import UserEntropySource

__all__ = [
    "AnuQrngSource",
    "EntropyBuffer",
    "EntropySource",
    "QRandomSource",
    "SavedEntropySource",
    "SourceChain",
    "SourceDescriptor",
    "SystemEntropySource",
    "UserEntropySource",
    "available_sources",
    "build_source_chain",
    "register_entropy_source",
]
