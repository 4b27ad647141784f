from .orders import OrderService, SyncReport
from .products import ProductService
from .promo_codes import PromoCodeService
from .sync import FullSyncRunner
from .users import UserService

__all__ = [
    "FullSyncRunner",
    "OrderService",
    "ProductService",
    "PromoCodeService",
    "SyncReport",
    "UserService",
]
