"""
DOM Contract & Projections
==========================

Everything that depends on the structure of the report HTML.

Components:
- DomContract: Element ids/classes the report must provide
- DomProjection / ReportDomProjection: Browser-side DOM mutations
- inspect_html: Static lxml check of the contract before rendering
"""

from .projection import (
    DomContract,
    DomProjection,
    Projection,
    ProjectionKind,
    ReportDomProjection,
)

from .contract import (
    ContractReport,
    inspect_html,
)

__all__ = [
    "DomContract",
    "DomProjection",
    "Projection",
    "ProjectionKind",
    "ReportDomProjection",
    "ContractReport",
    "inspect_html",
]
