__all__ = [
    "MAX_PRODUCT",
    "MIN_SUM",
    "BestPathEngine",
    "BestPathTable",
    "BestRatePath",
    "BestRateService",
    "Endpoint",
    "EndpointRegistry",
    "PathAlgebra",
    "RelationGraph",
]

__version__ = "0.1.0"

from .algebra import MAX_PRODUCT, MIN_SUM, PathAlgebra
from .engine import BestPathEngine, BestPathTable
from .graph import RelationGraph
from .models import BestRatePath
from .registry import Endpoint, EndpointRegistry
from .service import BestRateService
