"""VIN products and their links to catalog documents."""

from .types import VinDetail, VinProduct, VinPage
from .linkage import VinLinkRow, VinLinkageList
from .editor import VinEditor
from .manager import VinManager

__all__ = [
    "VinDetail",
    "VinProduct",
    "VinPage",
    "VinLinkRow",
    "VinLinkageList",
    "VinEditor",
    "VinManager",
]
