"""Defect report status and reason enums.

Statuses are grouped for the dashboard statistics: a report is open while
``Aperta``, closed once it reached any other status, and counted as
approved when fully or partially approved.
"""

from enum import Enum
from typing import FrozenSet


class DefectStatus(str, Enum):
    OPEN = "Aperta"
    APPROVED = "Approvata"
    PARTIALLY_APPROVED = "Approvata Parzialmente"
    REJECTED = "Respinta"


class DefectReason(str, Enum):
    TRANSPORT_DAMAGE = "Danni da trasporto"
    PRE_WARRANTY_NONCONFORMITY = "Difformità Pre-Garanzia Tecnica"
    BODYWORK = "Carrozzeria"


CLOSED_STATUSES: FrozenSet[DefectStatus] = frozenset(
    {
        DefectStatus.APPROVED,
        DefectStatus.PARTIALLY_APPROVED,
        DefectStatus.REJECTED,
    }
)

APPROVED_STATUSES: FrozenSet[DefectStatus] = frozenset(
    {
        DefectStatus.APPROVED,
        DefectStatus.PARTIALLY_APPROVED,
    }
)
