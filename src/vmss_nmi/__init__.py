"""VMSS NMI - pendingNMI locator and patcher."""
from .patch import REPORT_ONLY, locate_nmi, patch_byte

__all__ = ["REPORT_ONLY", "locate_nmi", "patch_byte"]
