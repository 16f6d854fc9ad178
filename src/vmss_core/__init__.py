"""VMSS Core - container decoding shared by the NMI tool."""
from .errors import VmssError
from .reader import iter_tags, read_groups, read_header
from .tags import decode_tag, encode_tag

__all__ = ["VmssError", "iter_tags", "read_groups", "read_header", "decode_tag", "encode_tag"]
