"""Category model and the fixed category table."""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from eventscape.models.base import Base, TimestampMixin

# Fixed category table. Ids are referenced by the LLM prompt and by stored events,
# so they must never be renumbered.
CATEGORIES: dict[int, str] = {
    1: "Arts & Culture",
    2: "Attractions",
    3: "Beauty & Personal Care",
    4: "Business & Networking",
    5: "Education",
    6: "Entertainment",
    7: "Family & Kids",
    8: "Festivals & Markets",
    9: "Food & Drinks",
    10: "Health & Wellness",
    11: "Music & Concerts",
    12: "Nature & Parks",
    13: "Nightlife & Bars",
    14: "Professional Services",
    15: "Religious & Spiritual",
    16: "Shopping & Retail",
    17: "Sports & Fitness",
    18: "Technology",
    19: "Transportation & Travel",
    20: "Others",
}

MIN_CATEGORY_ID = min(CATEGORIES)
MAX_CATEGORY_ID = max(CATEGORIES)


class Category(Base, TimestampMixin):
    """Event category."""

    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)

    def __repr__(self) -> str:
        return f"<Category(id={self.id}, name={self.name!r})>"
