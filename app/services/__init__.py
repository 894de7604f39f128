"""
app/services package marker.
"""

from app.services.feeder_export_service import (
    FeederExport,
    FeederExportService,
    get_feeder_export_service,
)
from app.services.improvement_service import (
    DateRangeError,
    ImprovementService,
    ReviewQueue,
    get_improvement_service,
)

__all__ = [
    "DateRangeError",
    "FeederExport",
    "FeederExportService",
    "get_feeder_export_service",
    "ImprovementService",
    "ReviewQueue",
    "get_improvement_service",
]
