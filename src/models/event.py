"""
Event models for cocktail bookings.

This module contains:
- Event: A client booking (title, date, guests, contact, pricing tier)
- EventRecipe: Junction table holding the servings chosen per recipe
"""

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from .base import BaseModel
from src.utils.constants import DEFAULT_EVENT_TITLE, EVENT_STATUS_DRAFT, TIER_ECONOMY


class Event(BaseModel):
    """
    Event model representing a cocktail booking.

    Attributes:
        title: Event title
        event_date: Date of the event (optional while drafting)
        guest_count: Number of guests (optional)
        notes: Free-text notes from the client
        status: draft, submitted or confirmed
        client_email: Client contact email
        client_phone: Client telephone number
        pricing_tier: economy, business, first_class (budget is legacy economy)
    """

    __tablename__ = "events"

    title = Column(String(200), nullable=False, default=DEFAULT_EVENT_TITLE)
    event_date = Column(Date, nullable=True)
    guest_count = Column(Integer, nullable=True)
    notes = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default=EVENT_STATUS_DRAFT, index=True)
    client_email = Column(String(200), nullable=True)
    client_phone = Column(String(50), nullable=True)
    pricing_tier = Column(String(20), nullable=False, default=TIER_ECONOMY)

    event_recipes = relationship(
        "EventRecipe",
        back_populates="event",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="EventRecipe.id",
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('draft', 'submitted', 'confirmed')", name="ck_event_status_valid"
        ),
        CheckConstraint(
            "pricing_tier IN ('economy', 'business', 'first_class', 'budget')",
            name="ck_event_pricing_tier_valid",
        ),
        CheckConstraint(
            "guest_count IS NULL OR guest_count > 0", name="ck_event_guest_count_positive"
        ),
    )

    def __repr__(self) -> str:
        """String representation of event."""
        return f"Event(id={self.id}, title='{self.title}', status='{self.status}')"

    def get_drinks_count(self) -> int:
        """
        Total servings across the event's selection.

        Returns:
            Sum of servings over all selected recipes
        """
        return sum(er.servings or 0 for er in self.event_recipes)


class EventRecipe(BaseModel):
    """
    Servings chosen for one recipe in an event.

    Attributes:
        event_id: Owning event
        recipe_id: Selected recipe
        servings: Number of servings (> 0; zero-serving rows are not stored)
    """

    __tablename__ = "event_recipes"

    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False)
    recipe_id = Column(Integer, ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False)
    servings = Column(Integer, nullable=False)

    event = relationship("Event", back_populates="event_recipes")
    recipe = relationship("Recipe", lazy="joined")

    __table_args__ = (
        UniqueConstraint("event_id", "recipe_id", name="uq_event_recipe"),
        Index("idx_event_recipe_event", "event_id"),
        CheckConstraint("servings > 0", name="ck_event_recipe_servings_positive"),
    )

    def __repr__(self) -> str:
        """String representation of event recipe."""
        return (
            f"EventRecipe(event_id={self.event_id}, recipe_id={self.recipe_id}, "
            f"servings={self.servings})"
        )
