"""Fatal conditions raised while decoding or patching a VMSS file."""
from __future__ import annotations

ERRORS = {
  "E_TRUNCATED_HEADER": "couldn't read VMSS header",
  "E_TRUNCATED_GROUPS": "couldn't read group table",
  "E_TRUNCATED_TAG": "couldn't read tag",
  "E_TRUNCATED_NAME": "couldn't read name",
  "E_TRUNCATED_INDICES": "couldn't read index",
  "E_TRUNCATED_BLOCK": "couldn't read block header",
  "E_TRUNCATED_VALUE": "couldn't read value",
  "E_LEGACY_FORMAT": "can't read 32-bit VMSS file",
  "E_UNRECOGNIZED_FORMAT": "not recognized as a VMSS file",
  "E_GROUP_COUNT": "group count exceeds limit",
  "E_SEEK": "couldn't seek",
  "E_FIELD_SIZE": "unexpected field size",
  "E_WRITE": "couldn't write value",
}


class VmssError(ValueError):
    """Base class: every VMSS error is fatal to the run."""

    code = "E_VMSS"

    def __init__(self, offset: int | None = None, detail: str | None = None):
        self.offset = offset
        self.detail = detail
        msg = ERRORS.get(self.code, "VMSS error")
        if offset is not None:
            msg += f" at offset 0x{offset:x}"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class TruncatedHeader(VmssError):
    code = "E_TRUNCATED_HEADER"


class TruncatedGroupTable(VmssError):
    code = "E_TRUNCATED_GROUPS"


class TruncatedTag(VmssError):
    code = "E_TRUNCATED_TAG"


class TruncatedName(VmssError):
    code = "E_TRUNCATED_NAME"


class TruncatedIndices(VmssError):
    code = "E_TRUNCATED_INDICES"


class TruncatedBlockHeader(VmssError):
    code = "E_TRUNCATED_BLOCK"


class TruncatedValue(VmssError):
    code = "E_TRUNCATED_VALUE"


class UnsupportedLegacyFormat(VmssError):
    code = "E_LEGACY_FORMAT"


class UnrecognizedFormat(VmssError):
    code = "E_UNRECOGNIZED_FORMAT"


class GroupCountExceeded(VmssError):
    code = "E_GROUP_COUNT"


class SeekFailure(VmssError):
    code = "E_SEEK"


class UnexpectedFieldSize(VmssError):
    code = "E_FIELD_SIZE"


class WriteFailure(VmssError):
    code = "E_WRITE"
