"""VMSS on-disk protocol constants.

Single source of truth for magic values and record layouts.
All multi-byte integers are little-endian.
"""

# Container magics
MAGIC_LEGACY = 0xBED0BED0  # 32-bit layout, rejected
MAGIC_RESTORED = 0xBED1BED1
MAGIC = 0xBED2BED2
MAGIC_PARTIAL = 0xBED3BED3

ACCEPTED_MAGICS = frozenset({MAGIC, MAGIC_RESTORED, MAGIC_PARTIAL})

# Header: [Id(4) | Version(4) | NumGroups(4)] = 12 bytes
HEADER_FMT = "<III"
HEADER_LEN = 12

# Group: [Name(64) | Offset(8) | Size(8)] = 80 bytes
GROUP_NAME_LEN = 64
GROUP_FMT = "<64sQQ"
GROUP_LEN = 80

# Tag header bitfield
TAG_FMT = "<H"
TAG_LEN = 2
TAG_NULL = 0

TAG_NAMELEN_MASK = 0xFF
TAG_NAMELEN_SHIFT = 8
TAG_NINDX_MASK = 0x3
TAG_NINDX_SHIFT = 6
TAG_VALSIZE_MASK = 0x3F
TAG_VALSIZE_SHIFT = 0

# Value-size codes that mean "a block follows"
TAG_VALSIZE_BLOCK_COMPRESSED = 0x3E
TAG_VALSIZE_BLOCK = 0x3F

INDEX_FMT = "<I"
INDEX_LEN = 4
MAX_INDICES = 3

# Block header: [Size(8) | MemSize(8)] then a separate u16 pad
BLOCK_FMT = "<QQ"
BLOCK_LEN = 16
BLOCK_PAD_FMT = "<H"
BLOCK_PAD_LEN = 2

# Allocation bound for the group table
MAX_GROUPS = 64 * 1024

# Target of the patcher
TARGET_GROUP = "cpu"
TARGET_FIELD = "pendingNMI"
NMI_SET = 1
NMI_CLEAR = 0
DEFAULT_CPU = 0
