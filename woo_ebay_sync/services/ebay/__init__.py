from .auth import EbayAuthContext
from .client import EbayClient
from .inventory import InventoryService
from .location import LocationService
from .offers import OfferWorkflow
from .taxonomy import CategoryResolver
