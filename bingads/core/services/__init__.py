from .base_service import BaseService
from .services import (
    AdInsightService,
    BulkService,
    CampaignManagementService,
    CustomerBillingService,
    CustomerManagementService,
    ReportingService,
    SERVICES,
)

__all__ = [
    "BaseService",
    "AdInsightService",
    "BulkService",
    "CampaignManagementService",
    "CustomerBillingService",
    "CustomerManagementService",
    "ReportingService",
    "SERVICES",
]
