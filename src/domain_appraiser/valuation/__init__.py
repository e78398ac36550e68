from .models import ValuationResult, ValuationTiers, PriceTiers
from .composer import brand_multiplier, compose_prices
from .remote import ReplicateValuationClient, parse_valuation_response
from .orchestrator import ValuationOrchestrator
from .service import AppraisalService, DomainAppraisal

__all__ = [
    'ValuationResult', 'ValuationTiers', 'PriceTiers',
    'brand_multiplier', 'compose_prices',
    'ReplicateValuationClient', 'parse_valuation_response',
    'ValuationOrchestrator',
    'AppraisalService', 'DomainAppraisal',
]
