from sqlalchemy import (
    Boolean,
    String,
    Text,
    DateTime,
    CheckConstraint,
    UniqueConstraint,
    Index,
    text,
    ForeignKey,
    Float,
    Integer
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.orm import declarative_base
from typing import Optional, List

Base = declarative_base()

LISTING_STATUSES = ("active", "pending", "sold", "deactivated")
TERMINAL_LISTING_STATUSES = ("sold", "deactivated")


class User(Base):
    """
    Marketplace account. Buyers bid and save listings, sellers post listings,
    admins review KYC documents and moderate accounts.
    """
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("role IN ('buyer', 'seller', 'admin')", name="user_role_check"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    # Stored and compared verbatim
    password: Mapped[str] = mapped_column(String(255), nullable=False)
    first_name: Mapped[Optional[str]] = mapped_column(String(100))
    last_name: Mapped[Optional[str]] = mapped_column(String(100))
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="buyer")
    id_number: Mapped[Optional[str]] = mapped_column(String(100))

    is_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_blocked: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    created_at: Mapped[DateTime] = mapped_column(
        DateTime(True),
        server_default=text("CURRENT_TIMESTAMP"),
        nullable=False
    )

    listings: Mapped[List["Listing"]] = relationship("Listing", back_populates="seller")
    notifications: Mapped[List["Notification"]] = relationship("Notification", back_populates="user")
    kyc_documents: Mapped[List["KYCDocument"]] = relationship("KYCDocument", back_populates="user")

    @property
    def display_name(self) -> str:
        return self.first_name or self.email


class Listing(Base):
    """
    Waste material offered by a seller, either at a fixed price or by auction
    (price is then the starting price bids must exceed)
    """
    __tablename__ = "listings"
    __table_args__ = (
        CheckConstraint("price_type IN ('fixed', 'bidding')", name="listing_price_type_check"),
        CheckConstraint("price >= 0", name="listing_price_non_negative_check"),
        Index("ix_listings_status_category", "status", "category"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    seller_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id"),
        nullable=False,
        index=True
    )

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    category: Mapped[Optional[str]] = mapped_column(String(50))
    quality: Mapped[Optional[str]] = mapped_column(String(50))
    quality_notes: Mapped[Optional[str]] = mapped_column(Text)

    price_type: Mapped[str] = mapped_column(String(20), nullable=False, default="fixed")
    price: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    quantity: Mapped[Optional[str]] = mapped_column(String(100))  # free text, e.g. "500kg"

    latitude: Mapped[Optional[float]] = mapped_column(Float)
    longitude: Mapped[Optional[float]] = mapped_column(Float)

    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")

    # AI audit outcome
    is_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    verification_notes: Mapped[Optional[str]] = mapped_column(Text)

    created_at: Mapped[DateTime] = mapped_column(
        DateTime(True),
        server_default=text("CURRENT_TIMESTAMP"),
        nullable=False
    )

    seller: Mapped["User"] = relationship("User", back_populates="listings")
    images: Mapped[List["ListingImage"]] = relationship(
        "ListingImage",
        back_populates="listing",
        cascade="all, delete-orphan",
        order_by="ListingImage.id"
    )
    bids: Mapped[List["Bid"]] = relationship("Bid", back_populates="listing")


class ListingImage(Base):
    __tablename__ = "listing_images"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    listing_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("listings.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    # URL or inline data: URL
    image_url: Mapped[str] = mapped_column(Text, nullable=False)

    listing: Mapped["Listing"] = relationship("Listing", back_populates="images")


class Bid(Base):
    """
    Offer on a bidding listing. The highest amount is the current leader;
    equal amounts are ordered by id, so the earliest bid wins a tie.
    """
    __tablename__ = "bids"
    __table_args__ = (
        CheckConstraint("amount > 0", name="bid_amount_positive_check"),
        Index("ix_bids_listing_amount", "listing_id", "amount"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    listing_id: Mapped[int] = mapped_column(Integer, ForeignKey("listings.id"), nullable=False)
    buyer_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    amount: Mapped[float] = mapped_column(Float, nullable=False)

    created_at: Mapped[DateTime] = mapped_column(
        DateTime(True),
        server_default=text("CURRENT_TIMESTAMP"),
        nullable=False
    )

    listing: Mapped["Listing"] = relationship("Listing", back_populates="bids")
    buyer: Mapped["User"] = relationship("User")


class Notification(Base):
    __tablename__ = "notifications"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    is_read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    created_at: Mapped[DateTime] = mapped_column(
        DateTime(True),
        server_default=text("CURRENT_TIMESTAMP"),
        nullable=False
    )

    user: Mapped["User"] = relationship("User", back_populates="notifications")


class KYCDocument(Base):
    """
    Identity document submitted for admin review. Approval marks the owner verified.
    """
    __tablename__ = "kyc_documents"
    __table_args__ = (
        CheckConstraint("status IN ('pending', 'approved', 'rejected')", name="kyc_status_check"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    document_url: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(String(20), default="pending", nullable=False)

    created_at: Mapped[DateTime] = mapped_column(
        DateTime(True),
        server_default=text("CURRENT_TIMESTAMP"),
        nullable=False
    )

    user: Mapped["User"] = relationship("User", back_populates="kyc_documents")


class Report(Base):
    __tablename__ = "reports"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    reporter_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    target_type: Mapped[str] = mapped_column(String(20), nullable=False)  # listing, user
    target_id: Mapped[int] = mapped_column(Integer, nullable=False)
    reason: Mapped[Optional[str]] = mapped_column(Text)
    status: Mapped[str] = mapped_column(String(20), default="pending", nullable=False)

    created_at: Mapped[DateTime] = mapped_column(
        DateTime(True),
        server_default=text("CURRENT_TIMESTAMP"),
        nullable=False
    )


class SavedListing(Base):
    __tablename__ = "saved_listings"
    __table_args__ = (
        UniqueConstraint("user_id", "listing_id", name="unique_saved_listing_per_user"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    listing_id: Mapped[int] = mapped_column(Integer, ForeignKey("listings.id"), nullable=False)

    created_at: Mapped[DateTime] = mapped_column(
        DateTime(True),
        server_default=text("CURRENT_TIMESTAMP"),
        nullable=False
    )
