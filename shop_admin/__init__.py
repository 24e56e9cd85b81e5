from .models import AdvanceOrder, Order, Pending, Shop, Synced
from .state import AppState

__version__ = "0.1.0"

__all__ = ["AdvanceOrder", "AppState", "Order", "Pending", "Shop", "Synced", "__version__"]
