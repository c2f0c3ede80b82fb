"""Concrete Bing Ads v13 services.

Each class only names its entry in the endpoint catalog; a few common
operations are wrapped for convenience.
"""

from typing import Any, Dict, List, Optional

from bingads.domain.models.common import ServiceName

from .base_service import BaseService

# Maximum number of ads accepted by a single add_ads call
ADS_PER_CALL_LIMIT = 50


class AdInsightService(BaseService):
    service_name = ServiceName('ad_insight')


class BulkService(BaseService):
    service_name = ServiceName('bulk')


class CampaignManagementService(BaseService):
    service_name = ServiceName('campaign_management')

    def get_campaigns_by_account_id(self, campaign_type: Optional[str] = None) -> Any:
        payload: Dict[str, Any] = {'account_id': self.account_id}
        if campaign_type:
            payload['campaign_type'] = campaign_type
        response = self.call('get_campaigns_by_account_id', payload)
        return self.response_body(response, 'get_campaigns_by_account_id')

    def add_ads(self, ad_group_id: Any, ads: List[Dict[str, Any]]) -> Any:
        self.ensure_limit('add', ads, ADS_PER_CALL_LIMIT, 'ad')
        response = self.call('add_ads', {'ad_group_id': ad_group_id, 'ads': {'ad': ads}})
        return self.response_body(response, 'add_ads')


class CustomerBillingService(BaseService):
    service_name = ServiceName('customer_billing')


class CustomerManagementService(BaseService):
    service_name = ServiceName('customer_management')

    def get_account(self, account_id: Optional[Any] = None) -> Any:
        response = self.call('get_account', {'account_id': account_id or self.account_id})
        return self.response_body(response, 'get_account')


class ReportingService(BaseService):
    service_name = ServiceName('reporting')


SERVICES = {
    cls.service_name: cls
    for cls in (
        AdInsightService,
        BulkService,
        CampaignManagementService,
        CustomerBillingService,
        CustomerManagementService,
        ReportingService,
    )
}
