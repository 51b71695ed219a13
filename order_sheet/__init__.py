"""Turn exported chat orders into a per-product order sheet."""

from .schema import CombinedOrder, OrderFragment, OrderItem, ProductRef, SheetGrid  # noqa: F401
from .schema import InconsistentColumnCount, NoOrdersFound  # noqa: F401
from .service import build_sheet, parse_transcript, run_pipeline  # noqa: F401
