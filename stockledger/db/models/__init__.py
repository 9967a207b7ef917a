from .material import Material
from .inventory import InboundRecord, OutboundRecord
from .order import Order, OrderStatus

__all__ = [n for n in dir() if n[:1].isupper()]
