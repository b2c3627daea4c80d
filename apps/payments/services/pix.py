"""
PIX Payment Module
==================

Builds static PIX "BR Code" payloads (the EMV QR format defined by the
Banco Central do Brasil) and renders them as QR codes.

Example:
    Generating a QR code for a pending payment::

        from apps.payments.services import PixPaymentGenerator

        payload = PixPaymentGenerator.generate_for_payment(payment)
        image = PixPaymentGenerator.generate_qr_image(payload)
"""

from decimal import Decimal
from io import BytesIO
import base64
import logging
import re
import unicodedata

import qrcode
from django.conf import settings

from .exceptions import PixConfigurationError, PixGenerationError

logger = logging.getLogger(__name__)


def crc16_ccitt(data: str) -> str:
    """CRC16-CCITT (poly 0x1021, init 0xFFFF) as four uppercase hex digits."""
    crc = 0xFFFF
    for byte in data.encode('utf-8'):
        crc ^= byte << 8
        for _ in range(8):
            if crc & 0x8000:
                crc = ((crc << 1) ^ 0x1021) & 0xFFFF
            else:
                crc = (crc << 1) & 0xFFFF
    return f'{crc:04X}'


def _ascii(value: str) -> str:
    normalized = unicodedata.normalize('NFKD', value or '')
    return normalized.encode('ascii', 'ignore').decode('ascii').strip()


class PixPaymentGenerator:
    """
    Generate PIX BR Code payloads and QR images.

    A BR Code is a sequence of EMV TLV fields: a two digit id, a two digit
    length and the value. Nested templates (26 and 62) carry their own TLV
    fields inside the value.

    Fields::

        00 Payload format indicator ("01")
        26 Merchant account information
           00 GUI ("br.gov.bcb.pix")
           01 PIX key
           02 Description (optional)
        52 Merchant category code ("0000")
        53 Currency (986 = BRL)
        54 Amount (optional, omitted for open-amount codes)
        58 Country code ("BR")
        59 Merchant name (max 25)
        60 Merchant city (max 15)
        62 Additional data
           05 Transaction id ("***" when absent)
        63 CRC16 over the whole payload including "6304"

    Methods:
        generate_payload: Build the BR Code string.
        generate_qr_image: Render a payload as a QR image.
        qr_image_base64: Render a payload as a base64 PNG.
        generate_for_payment: Build and store the payload for a Payment.
    """

    GUI = 'br.gov.bcb.pix'
    MAX_NAME_LENGTH = 25
    MAX_CITY_LENGTH = 15
    MAX_TXID_LENGTH = 25

    @staticmethod
    def _field(field_id, value):
        if len(value) > 99:
            raise PixGenerationError(f"Field {field_id} exceeds 99 characters")
        return f'{field_id}{len(value):02d}{value}'

    @staticmethod
    def generate_payload(
        key,
        merchant_name,
        merchant_city,
        amount=None,
        txid='',
        description=''
    ):
        """
        Generate a static PIX BR Code payload.

        Args:
            key (str): The receiver's PIX key (CPF/CNPJ, e-mail, phone or
                random key).
            merchant_name (str): Receiver name, truncated to 25 characters.
            merchant_city (str): Receiver city, truncated to 15 characters.
            amount (Decimal, optional): Fixed amount in BRL. When None or
                zero the payer types the amount.
            txid (str, optional): Alphanumeric transaction id used to match
                the incoming transfer. Defaults to "***".
            description (str, optional): Free text shown to the payer.

        Returns:
            str: The BR Code, ready to be encoded as a QR code or used as
            "copia e cola" text.

        Raises:
            PixGenerationError: If the key or name is empty, or a field is
                too long.

        Example::

            payload = PixPaymentGenerator.generate_payload(
                key='therapist@example.com',
                merchant_name='Ana Souza',
                merchant_city='Sao Paulo',
                amount=Decimal('150.00'),
                txid='PAY1A2B3C4D0042',
            )
        """
        field = PixPaymentGenerator._field

        key = (key or '').strip()
        name = _ascii(merchant_name)[:PixPaymentGenerator.MAX_NAME_LENGTH]
        city = _ascii(merchant_city).upper()[:PixPaymentGenerator.MAX_CITY_LENGTH]
        if not key:
            raise PixGenerationError("PIX key is required")
        if not name:
            raise PixGenerationError("Merchant name is required")

        txid = re.sub(r'[^A-Za-z0-9]', '', txid or '')[:PixPaymentGenerator.MAX_TXID_LENGTH] or '***'

        account_info = field('00', PixPaymentGenerator.GUI) + field('01', key)
        description = _ascii(description)
        if description:
            account_info += field('02', description[:50])

        parts = [
            field('00', '01'),
            field('26', account_info),
            field('52', '0000'),
            field('53', '986'),
        ]
        if amount is not None and Decimal(amount) > 0:
            parts.append(field('54', f'{Decimal(amount):.2f}'))
        parts += [
            field('58', 'BR'),
            field('59', name),
            field('60', city or 'BRASIL'),
            field('62', field('05', txid)),
        ]

        payload = ''.join(parts) + '6304'
        return payload + crc16_ccitt(payload)

    @staticmethod
    def generate_qr_image(payload, output_path=None):
        """
        Render a payload as a QR code.

        Args:
            payload (str): BR Code from generate_payload().
            output_path (str, optional): When given, the PNG is written there
                and the path is returned. Otherwise the PIL image is returned.

        Note:
            Error correction level M is what banking apps expect for PIX.
        """
        qr = qrcode.QRCode(
            version=None,
            error_correction=qrcode.constants.ERROR_CORRECT_M,
            box_size=10,
            border=4,
        )
        qr.add_data(payload)
        qr.make(fit=True)

        img = qr.make_image(fill_color="black", back_color="white")

        if output_path:
            img.save(output_path)
            return output_path

        return img

    @staticmethod
    def qr_image_base64(payload):
        """Return the QR code as a base64-encoded PNG."""
        buffer = BytesIO()
        PixPaymentGenerator.generate_qr_image(payload).save(buffer, format='PNG')
        return base64.b64encode(buffer.getvalue()).decode('ascii')

    @staticmethod
    def generate_for_payment(payment, merchant_city=None):
        """
        Build the BR Code for a Payment from its owner's PIX settings and
        store it on ``payment.pix_payload``.

        The payment reference doubles as the transaction id, so incoming
        transfers can be matched back to the payment.

        Raises:
            PixConfigurationError: If the therapist has no PIX key.
        """
        owner = payment.owner
        if not owner.pix_key:
            raise PixConfigurationError("Configure a PIX key before generating PIX charges")

        merchant_name = owner.pix_merchant_name or owner.account_holder_name or owner.get_display_name()
        payload = PixPaymentGenerator.generate_payload(
            key=owner.pix_key,
            merchant_name=merchant_name,
            merchant_city=merchant_city or settings.PIX_MERCHANT_CITY,
            amount=payment.amount,
            txid=payment.reference,
        )

        payment.pix_payload = payload
        payment.save(update_fields=['pix_payload', 'updated_at'])
        logger.debug("PIX payload generated for payment %s", payment.reference)
        return payload
