"""
Import pipeline data model.

ImportOptions goes in, ImportSummary comes out. CatalogRecord is the
source-neutral shape every importer maps its rows into before
reconciliation.
"""

from dataclasses import dataclass, field

ERROR_PREFIX = "Error"


@dataclass(frozen=True, slots=True)
class ImportOptions:
    """
    Options for one importer invocation.

    Attributes:
        dry_run: Compute changes without committing them
        upsert: Update existing rows (the pipeline never deletes)
        limit: Maximum number of records to consider
        user_id: Acting user, passed through from the upstream auth layer
        set_code: Narrows a remote fetch to one set/expansion
    """

    dry_run: bool = True
    upsert: bool = True
    limit: int | None = None
    user_id: int | None = None
    set_code: str | None = None


@dataclass(slots=True)
class ImportSummary:
    """
    Aggregate result of one importer run.

    Counters only ever grow. Messages starting with ``Error`` mark invalid
    records; every other message is informational.
    """

    source: str
    dry_run: bool
    cards_created: int = 0
    cards_updated: int = 0
    printings_created: int = 0
    printings_updated: int = 0
    errors: int = 0
    messages: list[str] = field(default_factory=list)

    @property
    def created(self) -> int:
        return self.cards_created + self.printings_created

    @property
    def updated(self) -> int:
        return self.cards_updated + self.printings_updated

    def add_error(self, label: str, reason: str) -> None:
        """Count an invalid record and keep its message for the preview."""
        self.errors += 1
        self.messages.append(f"{ERROR_PREFIX} [{label}] {reason}")

    def add_info(self, message: str) -> None:
        self.messages.append(message)


@dataclass(frozen=True, slots=True)
class CatalogRecord:
    """
    One incoming card printing, already mapped out of its source format.

    The card natural key is (game, name); the printing natural key is
    (game, set_code, number).
    """

    game: str
    name: str
    set_code: str
    number: str
    card_type: str = ""
    description: str | None = None
    details_json: str | None = None
    rarity: str = "Unknown"
    style: str = "Standard"
    image_url: str | None = None
    printing_details_json: str | None = None
    price: float | None = None

    @property
    def card_key(self) -> tuple[str, str]:
        return (self.game, self.name.strip())

    @property
    def printing_key(self) -> tuple[str, str, str]:
        # Set codes compare case-insensitively across sources
        return (self.game, self.set_code.strip().upper(), self.number.strip())

    @property
    def label(self) -> str:
        _, set_code, number = self.printing_key
        return f"{self.name.strip()} ({set_code} #{number})"
