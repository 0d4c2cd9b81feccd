"""QR identity card rendering."""
import io
import logging
from typing import Optional, Protocol, Sequence, Tuple

import httpx
import qrcode
from PIL import Image, ImageDraw, ImageFont

from workshop_registry.config import EVENT_DATES, EVENT_TITLE, EVENT_VENUE
from workshop_registry.models.participant import Participant

logger = logging.getLogger(__name__)

CARD_WIDTH = 400
CARD_HEIGHT = 550
QR_SIZE = 150
LOGO_SIZE = 60

QR_DARK = "#1b5e4e"
QR_LIGHT = "#ffffff"
GRADIENT_TOP = (0xE8, 0xF4, 0xF1)
GRADIENT_BOTTOM = (0xFF, 0xFF, 0xFF)

BOLD_FONTS = ("DejaVuSans-Bold.ttf", "LiberationSans-Bold.ttf", "arialbd.ttf", "Arial Bold.ttf")
REGULAR_FONTS = ("DejaVuSans.ttf", "LiberationSans-Regular.ttf", "arial.ttf", "Arial.ttf")


class QrEncoder(Protocol):
    """Turns a text payload into a scannable image."""

    def encode(self, text: str) -> Image.Image:
        ...


class QrCodeEncoder:
    """QR encoder backed by the qrcode package."""

    def __init__(self, size: int = QR_SIZE, dark: str = QR_DARK, light: str = QR_LIGHT):
        self.size = size
        self.dark = dark
        self.light = light

    def encode(self, text: str) -> Image.Image:
        qr = qrcode.QRCode(
            error_correction=qrcode.constants.ERROR_CORRECT_H,
            box_size=10,
            border=4,
        )
        qr.add_data(text)
        qr.make(fit=True)
        image = qr.make_image(fill_color=self.dark, back_color=self.light).convert("RGB")
        return image.resize((self.size, self.size), Image.NEAREST)


def _load_font(candidates: Sequence[str], size: int) -> ImageFont.ImageFont:
    for name in candidates:
        try:
            return ImageFont.truetype(name, size)
        except OSError:
            continue
    return ImageFont.load_default(size=size)


class CardRenderer:
    """Composes the downloadable participant ID card."""

    def __init__(self, encoder: Optional[QrEncoder] = None, logo_url: Optional[str] = None,
                 http_client: Optional[httpx.Client] = None, timeout: float = 5.0):
        self.encoder = encoder or QrCodeEncoder()
        self.logo_url = logo_url
        self.http_client = http_client
        self.timeout = timeout
        self._logo: Optional[Image.Image] = None
        self._logo_failed = False

    def render_preview(self, participant: Participant) -> Image.Image:
        """QR code whose payload is exactly the participant ID."""
        return self.encoder.encode(participant.id)

    def fetch_logo(self) -> Optional[Image.Image]:
        """
        Download the event logo.

        Returns:
            The logo image, or None when no URL is configured or anything
            goes wrong (network, HTTP status, undecodable bytes). A failed
            download is not retried for the lifetime of the renderer.
        """
        if self._logo is not None:
            return self._logo
        if not self.logo_url or self._logo_failed:
            return None

        try:
            if self.http_client is not None:
                response = self.http_client.get(self.logo_url)
            else:
                with httpx.Client(timeout=self.timeout, follow_redirects=True) as client:
                    response = client.get(self.logo_url)
            response.raise_for_status()
            logo = Image.open(io.BytesIO(response.content))
            logo.load()
        except (httpx.HTTPError, OSError, Image.DecompressionBombError) as e:
            logger.warning(f"Card logo failed to load from {self.logo_url}: {e}")
            self._logo_failed = True
            return None

        self._logo = logo.convert("RGBA")
        return self._logo

    def compose_card(self, participant: Participant) -> Image.Image:
        """
        Draw the full ID card.

        Layout (top to bottom): gradient background, border, logo, event
        title, QR code, name, role label, ID, dates and venue footer.
        """
        card = Image.new("RGB", (CARD_WIDTH, CARD_HEIGHT), GRADIENT_BOTTOM)
        draw = ImageDraw.Draw(card)

        _draw_gradient(draw, GRADIENT_TOP, GRADIENT_BOTTOM)
        draw.rectangle([15, 15, CARD_WIDTH - 15, CARD_HEIGHT - 15], outline=QR_DARK, width=3)

        logo = self.fetch_logo()
        if logo is not None:
            scaled = logo.resize((LOGO_SIZE, LOGO_SIZE))
            card.paste(scaled, (30, 30), scaled)

        _centered_text(draw, EVENT_TITLE, 120, _load_font(BOLD_FONTS, 16), QR_DARK)

        qr_image = self.render_preview(participant).resize((QR_SIZE, QR_SIZE))
        card.paste(qr_image, ((CARD_WIDTH - QR_SIZE) // 2, 150))

        _centered_text(draw, participant.name, 330, _load_font(BOLD_FONTS, 16), "#000000")
        _centered_text(draw, "Participant", 355, _load_font(BOLD_FONTS, 14), "#666666")
        _centered_text(draw, participant.id, 380, _load_font(BOLD_FONTS, 15), QR_DARK)

        footer_font = _load_font(REGULAR_FONTS, 13)
        _centered_text(draw, EVENT_DATES, 480, footer_font, "#999999")
        _centered_text(draw, EVENT_VENUE, 500, footer_font, "#999999")

        return card

    def card_png(self, participant: Participant) -> bytes:
        buffer = io.BytesIO()
        self.compose_card(participant).save(buffer, format="PNG")
        return buffer.getvalue()


def card_filename(participant: Participant) -> str:
    """Download name for a participant's card, e.g. "Asha Rao-ID-BINDS-03.png"."""
    safe_name = participant.name.replace("/", "_").replace("\\", "_")
    return f"{safe_name}-ID-{participant.id}.png"


def _draw_gradient(draw: ImageDraw.ImageDraw, top: Tuple[int, int, int],
                   bottom: Tuple[int, int, int]) -> None:
    for y in range(CARD_HEIGHT):
        ratio = y / (CARD_HEIGHT - 1)
        color = tuple(round(t + (b - t) * ratio) for t, b in zip(top, bottom))
        draw.line([(0, y), (CARD_WIDTH, y)], fill=color)


def _centered_text(draw: ImageDraw.ImageDraw, text: str, baseline: int,
                   font: ImageFont.ImageFont, fill: str) -> None:
    # Text sits on the baseline, horizontally centered on the card
    left, top, right, bottom = draw.textbbox((0, 0), text, font=font)
    x = (CARD_WIDTH - (right - left)) / 2 - left
    y = baseline - bottom
    draw.text((x, y), text, font=font, fill=fill)
