from .client import WooCommerceClient
