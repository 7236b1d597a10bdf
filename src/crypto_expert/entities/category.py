"""Category domain entity."""

from dataclasses import dataclass


@dataclass(frozen=True)
class CategoryRecord:
    """A CoinGecko coin category.

    Attributes:
        category_id: Unique category identifier (e.g. "decentralized-finance-defi")
        name: Display name (e.g. "Decentralized Finance (DeFi)")
    """

    category_id: str
    name: str

    def matches(self, keyword: str) -> bool:
        """Case-insensitive substring match against the name or the id."""
        needle = keyword.lower()
        return needle in self.name.lower() or needle in self.category_id.lower()
