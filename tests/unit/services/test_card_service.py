"""Unit tests for ID card rendering and QR decoding."""
import io

import httpx
import numpy as np
import pytest
from PIL import Image

from workshop_registry.models.participant import Participant
from workshop_registry.services.card_service import (
    CARD_HEIGHT,
    CARD_WIDTH,
    QR_SIZE,
    CardRenderer,
    QrCodeEncoder,
    card_filename,
)
from workshop_registry.services.qr_decoder import decode_frame, decode_image


@pytest.fixture
def participant():
    return Participant(id="BINDS-07", name="Asha Rao", email="asha@x.org",
                       institute="APU", registration_date="29/1/2026")


def png_bytes(color="red", size=(80, 80)):
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


def client_returning(response_factory, counter=None):
    def handler(request):
        if counter is not None:
            counter.append(request.url)
        return response_factory(request)

    return httpx.Client(transport=httpx.MockTransport(handler))


class TestQrEncoding:
    """Tests for the QR preview."""

    def test_preview_size(self, participant):
        """Test the preview is a square of QR_SIZE pixels."""
        image = CardRenderer().render_preview(participant)
        assert image.size == (QR_SIZE, QR_SIZE)

    def test_preview_decodes_to_participant_id(self, participant):
        """Test scanning the preview yields exactly the ID."""
        image = QrCodeEncoder(size=300).encode(participant.id)
        assert decode_image(image) == "BINDS-07"

    def test_custom_encoder_is_used(self, participant):
        """Test a substitute encoder receives the participant ID."""
        seen = []

        class FakeEncoder:
            def encode(self, text):
                seen.append(text)
                return Image.new("RGB", (QR_SIZE, QR_SIZE), "white")

        CardRenderer(encoder=FakeEncoder()).render_preview(participant)
        assert seen == ["BINDS-07"]


class TestCardComposition:
    """Tests for the full ID card."""

    def test_card_dimensions_without_logo(self, participant):
        """Test the card renders at 400x550 with no logo configured."""
        card = CardRenderer(logo_url=None).compose_card(participant)

        assert card.size == (CARD_WIDTH, CARD_HEIGHT)
        assert card.mode == "RGB"

    def test_card_still_renders_when_logo_fails(self, participant):
        """Test a failing logo download leaves a complete card."""
        client = client_returning(lambda request: httpx.Response(404))
        renderer = CardRenderer(logo_url="https://example.org/logo.png", http_client=client)

        card = renderer.compose_card(participant)

        assert card.size == (CARD_WIDTH, CARD_HEIGHT)

    def test_card_qr_is_scannable(self, participant):
        """Test the QR region of the composed card decodes to the ID."""
        card = CardRenderer().compose_card(participant)
        qr_region = card.crop((125, 150, 275, 300)).resize((300, 300), Image.NEAREST)

        assert decode_image(qr_region) == "BINDS-07"

    def test_card_png_is_png(self, participant):
        """Test card_png returns PNG bytes."""
        data = CardRenderer().card_png(participant)

        assert data.startswith(b"\x89PNG")
        assert Image.open(io.BytesIO(data)).size == (CARD_WIDTH, CARD_HEIGHT)

    def test_card_filename(self, participant):
        """Test the download name includes name and ID."""
        assert card_filename(participant) == "Asha Rao-ID-BINDS-07.png"


class TestLogoFetch:
    """Tests for logo download."""

    def test_logo_is_cached(self):
        """Test the logo is downloaded once."""
        requests = []
        client = client_returning(lambda request: httpx.Response(200, content=png_bytes()), requests)
        renderer = CardRenderer(logo_url="https://example.org/logo.png", http_client=client)

        assert renderer.fetch_logo() is not None
        assert renderer.fetch_logo() is not None
        assert len(requests) == 1

    def test_failed_logo_is_not_retried(self):
        """Test a failed download is remembered."""
        requests = []
        client = client_returning(lambda request: httpx.Response(503), requests)
        renderer = CardRenderer(logo_url="https://example.org/logo.png", http_client=client)

        assert renderer.fetch_logo() is None
        assert renderer.fetch_logo() is None
        assert len(requests) == 1

    def test_undecodable_logo_returns_none(self):
        """Test non-image bytes are treated as a missing logo."""
        client = client_returning(lambda request: httpx.Response(200, content=b"not an image"))
        renderer = CardRenderer(logo_url="https://example.org/logo.png", http_client=client)

        assert renderer.fetch_logo() is None


    def test_oversized_logo_returns_none(self, monkeypatch, participant):
        """Test a logo over the decompression limit is skipped and the card still renders."""
        monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 100)
        client = client_returning(lambda request: httpx.Response(200, content=png_bytes(size=(80, 80))))
        renderer = CardRenderer(logo_url="https://example.org/logo.png", http_client=client)

        assert renderer.fetch_logo() is None
        assert renderer.compose_card(participant).size == (CARD_WIDTH, CARD_HEIGHT)


class TestDecodeFrame:
    """Tests for frame decoding."""

    def test_blank_frame_returns_none(self):
        """Test a frame without a code yields nothing."""
        assert decode_frame(np.full((240, 320, 3), 255, dtype=np.uint8)) is None

    def test_empty_frame_returns_none(self):
        """Test an empty array is ignored."""
        assert decode_frame(np.zeros((0, 0, 3), dtype=np.uint8)) is None

    def test_bgra_frame_is_accepted(self, participant):
        """Test four-channel frames are converted before decoding."""
        rgb = np.asarray(QrCodeEncoder(size=300).encode(participant.id).convert("RGB"))
        bgra = np.dstack([rgb[:, :, ::-1], np.full(rgb.shape[:2], 255, dtype=np.uint8)])

        assert decode_frame(np.ascontiguousarray(bgra)) == "BINDS-07"
