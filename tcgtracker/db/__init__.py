from tcgtracker.db.database import dispose_db, get_session, init_db
from tcgtracker.db.operations import (
    count_cards,
    count_printings,
    get_card,
    get_printing,
)

__all__ = [
    "count_cards",
    "count_printings",
    "dispose_db",
    "get_card",
    "get_printing",
    "get_session",
    "init_db",
]
