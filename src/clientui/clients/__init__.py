from .facets import FacetProvider, Operation, OperationScope, scope_of
from .gateway import GatewayClient

__all__ = ["FacetProvider", "Operation", "OperationScope", "scope_of", "GatewayClient"]
