"""Mixins for SQLAlchemy models."""

from datetime import UTC, datetime

from sqlalchemy import Boolean, Column, DateTime, func


class TimestampMixin:
    """Mixin to add created_at and updated_at timestamp columns."""

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class PublishableMixin:
    """Visibility flags. Only published rows are served."""

    published = Column(Boolean, nullable=False, default=False, index=True)
    featured = Column(Boolean, nullable=False, default=False)
    published_at = Column(DateTime(timezone=True), nullable=True)

    def publish(self, when: datetime | None = None) -> None:
        """Make the row visible, keeping an earlier publication date."""
        self.published = True
        if self.published_at is None:
            self.published_at = when or datetime.now(UTC)
