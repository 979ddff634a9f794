"""
Merchant classifier: maps a merchant name or statement description to a
suggested category by keyword lookup.
"""

import logging
from types import MappingProxyType
from typing import FrozenSet, Mapping, Sequence, Tuple

from receiptflow.models.transaction import TransactionType

logger = logging.getLogger(__name__)

OTHER_EXPENSE = 'other-expense'
OTHER_INCOME = 'other-income'

# Tested in declaration order; the first category with a matching keyword wins.
# Labels are suggestions and do not all belong to CATEGORY_TAXONOMY.
MERCHANT_KEYWORDS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ('food', ('restaurant', 'cafe', 'pizza', 'burger', 'food', 'kitchen', 'diner', 'bistro')),
    ('groceries', ('grocery', 'supermarket', 'market', 'walmart', 'target', 'costco', 'safeway')),
    ('gas', ('gas', 'fuel', 'shell', 'exxon', 'bp', 'chevron', 'mobil')),
    ('shopping', ('store', 'shop', 'mall', 'retail', 'amazon', 'ebay')),
    ('healthcare', ('pharmacy', 'hospital', 'clinic', 'medical', 'doctor', 'cvs', 'walgreens')),
    ('entertainment', ('cinema', 'movie', 'theater', 'netflix', 'spotify', 'game')),
    ('transportation', ('uber', 'lyft', 'taxi', 'bus', 'train', 'metro', 'parking')),
    ('utilities', ('electric', 'water', 'internet', 'phone', 'cable', 'utility')),
)

# Categories the persistence layer accepts, per transaction type
CATEGORY_TAXONOMY: Mapping[TransactionType, FrozenSet[str]] = MappingProxyType({
    TransactionType.EXPENSE: frozenset({
        'food-dining', 'transportation', 'shopping', 'entertainment', 'bills-utilities',
        'healthcare', 'education', 'travel', 'groceries', 'gas', 'others',
    }),
    TransactionType.INCOME: frozenset({
        'salary', 'freelance', 'business', 'investment', 'rental', 'gift', 'others',
    }),
})


def categories_for_type(transaction_type: TransactionType) -> FrozenSet[str]:
    """Return the valid category labels for a transaction type."""
    return CATEGORY_TAXONOMY.get(TransactionType(transaction_type), frozenset())


def is_valid_category(transaction_type: TransactionType, category: str) -> bool:
    """Check whether a category would be accepted for the given type."""
    return category in categories_for_type(transaction_type)


class MerchantClassifier:
    """Keyword-based category suggestion for merchants and descriptions."""

    def __init__(
        self,
        keyword_table: Sequence[Tuple[str, Sequence[str]]] = MERCHANT_KEYWORDS,
        default_category: str = OTHER_EXPENSE,
    ):
        self.keyword_table = keyword_table
        self.default_category = default_category

    def suggest(self, name: str) -> str:
        """
        Suggest a category for a merchant name.

        Plain case-insensitive substring match against each keyword, in table
        order. No tokenization, so short keywords like "bp" or "bus" can match
        inside longer words.

        Args:
            name: Merchant name or transaction description (may be empty)

        Returns:
            Category label, or the default category when nothing matches
        """
        name_lower = (name or '').lower()
        if not name_lower:
            return self.default_category

        for category, keywords in self.keyword_table:
            for keyword in keywords:
                if keyword in name_lower:
                    logger.debug("Category keyword matched", extra={
                        "category": category,
                        "keyword": keyword,
                    })
                    return category

        return self.default_category


_default_classifier = MerchantClassifier()


def suggest_category(merchant_name: str) -> str:
    """Suggest a category using the default keyword table."""
    return _default_classifier.suggest(merchant_name)
