import os
import smtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from sqlalchemy.ext.asyncio import AsyncSession
from models import Notification
import logging

logger = logging.getLogger(__name__)

CURRENCY_SYMBOL = os.getenv("CURRENCY_SYMBOL", "₦")

# --- Email Configuration ---
SMTP_SERVER = os.getenv("SMTP_SERVER")
SMTP_PORT = int(os.getenv("SMTP_PORT", 587))
SMTP_USER = os.getenv("SMTP_USER")
SMTP_PASSWORD = os.getenv("SMTP_PASSWORD")
EMAIL_SENDER = os.getenv("EMAIL_SENDER")


def format_amount(amount: float) -> str:
    """460.0 -> '460', 460.5 -> '460.5'"""
    amount = float(amount)
    if amount.is_integer():
        return str(int(amount))
    return f"{amount:.2f}".rstrip("0").rstrip(".")


def add_notification(db: AsyncSession, user_id: int, message: str) -> Notification:
    """Stage an in-app notification on the caller's session; committed with the caller's transaction"""
    notification = Notification(user_id=user_id, message=message)
    db.add(notification)
    return notification


def send_email(to_email: str, subject: str, body_html: str):
    """Sends an email using SMTP."""
    if not all([SMTP_SERVER, SMTP_PORT, SMTP_USER, SMTP_PASSWORD, EMAIL_SENDER]):
        logger.warning("SMTP settings are not fully configured. Skipping email.")
        return False

    message = MIMEMultipart("alternative")
    message["Subject"] = subject
    message["From"] = EMAIL_SENDER
    message["To"] = to_email
    message.attach(MIMEText(body_html, "html"))

    try:
        with smtplib.SMTP(SMTP_SERVER, SMTP_PORT) as server:
            server.starttls()
            server.login(SMTP_USER, SMTP_PASSWORD)
            server.sendmail(EMAIL_SENDER, to_email, message.as_string())
        logger.info(f"Email sent successfully to {to_email}")
        return True
    except Exception as e:
        logger.error(f"Failed to send email to {to_email}: {e}")
        return False


# In-app message templates
def get_new_bid_message(listing_title: str, amount: float, bidder_name: str) -> str:
    return f'New bid of {CURRENCY_SYMBOL}{format_amount(amount)} placed on your listing "{listing_title}" by {bidder_name}.'


def get_outbid_message(listing_title: str, amount: float) -> str:
    return f'You have been outbid on "{listing_title}". The new highest bid is {CURRENCY_SYMBOL}{format_amount(amount)}.'


def get_won_message(listing_title: str, amount: float) -> str:
    return f'Congratulations! You won the bid for "{listing_title}" with a bid of {CURRENCY_SYMBOL}{format_amount(amount)}.'


def get_kyc_approved_message() -> str:
    return "Your identity verification has been approved. Your account is now verified."


def get_kyc_rejected_message() -> str:
    return "Your identity verification document was rejected. Please upload a clearer document."


# Email Templates
def get_auction_won_email(listing_title: str, amount: float, winner_name: str) -> tuple[str, str]:
    """Generate auction won email template"""
    subject = f"You won the auction - {listing_title}"

    body = f"""
    <html>
    <body>
        <h2>Congratulations, {winner_name}!</h2>
        <p>The seller has closed the auction and yours was the highest bid.</p>

        <div style="background-color: #f5f5f5; padding: 15px; border-radius: 5px;">
            <h3>Auction Details:</h3>
            <p><strong>Listing:</strong> {listing_title}</p>
            <p><strong>Winning Bid:</strong> {CURRENCY_SYMBOL}{format_amount(amount)}</p>
        </div>

        <p>The seller will contact you to arrange collection.</p>
        <p>Best regards,<br>WasteMarket Team</p>
    </body>
    </html>
    """

    return subject, body
