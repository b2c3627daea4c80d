"""
Tests for PIX BR Code generation.

Tests cover:
- CRC16-CCITT checksum
- TLV layout of the payload
- Text normalization and truncation
- Payload generation for stored payments
"""

import base64
from decimal import Decimal

import pytest

from apps.payments.services import (
    PixPaymentGenerator,
    PixConfigurationError,
    PixGenerationError,
    crc16_ccitt,
)


def parse_tlv(payload):
    """Split a BR Code into {id: value} (top level only)."""
    fields = {}
    position = 0
    while position < len(payload):
        field_id = payload[position:position + 2]
        length = int(payload[position + 2:position + 4])
        fields[field_id] = payload[position + 4:position + 4 + length]
        position += 4 + length
    return fields


class TestCrc16:

    def test_check_value(self):
        assert crc16_ccitt('123456789') == '29B1'

    def test_empty_string(self):
        assert crc16_ccitt('') == 'FFFF'

    def test_four_uppercase_hex_digits(self):
        value = crc16_ccitt('000201')
        assert len(value) == 4
        assert value == value.upper()


class TestGeneratePayload:

    def test_layout(self):
        payload = PixPaymentGenerator.generate_payload(
            key='therapist@example.com',
            merchant_name='Ana Souza',
            merchant_city='Sao Paulo',
            amount=Decimal('150.00'),
            txid='PAY1A2B3C4D0042',
        )
        fields = parse_tlv(payload)

        assert payload.startswith('000201')
        assert fields['26'] == '0014br.gov.bcb.pix0121therapist@example.com'
        assert fields['52'] == '0000'
        assert fields['53'] == '986'
        assert fields['54'] == '150.00'
        assert fields['58'] == 'BR'
        assert fields['59'] == 'Ana Souza'
        assert fields['60'] == 'SAO PAULO'
        assert fields['62'] == '0515PAY1A2B3C4D0042'

    def test_crc_covers_payload(self):
        payload = PixPaymentGenerator.generate_payload(
            key='+5511999990000',
            merchant_name='Ana',
            merchant_city='Rio',
        )

        assert payload[-8:-4] == '6304'
        assert payload[-4:] == crc16_ccitt(payload[:-4])

    def test_open_amount(self):
        payload = PixPaymentGenerator.generate_payload(key='k', merchant_name='Ana', merchant_city='Rio')

        assert '54' not in parse_tlv(payload)

    def test_zero_amount_is_open(self):
        payload = PixPaymentGenerator.generate_payload(
            key='k',
            merchant_name='Ana',
            merchant_city='Rio',
            amount=Decimal('0'),
        )

        assert '54' not in parse_tlv(payload)

    def test_default_txid(self):
        payload = PixPaymentGenerator.generate_payload(key='k', merchant_name='Ana', merchant_city='Rio')

        assert parse_tlv(payload)['62'] == '0503***'

    def test_txid_sanitized(self):
        payload = PixPaymentGenerator.generate_payload(
            key='k',
            merchant_name='Ana',
            merchant_city='Rio',
            txid='PAY-12_34',
        )

        assert parse_tlv(payload)['62'] == '0507PAY1234'

    def test_accents_removed_and_truncated(self):
        payload = PixPaymentGenerator.generate_payload(
            key='k',
            merchant_name='Consultório de Psicologia Integrada',
            merchant_city='São José dos Campos',
        )
        fields = parse_tlv(payload)

        assert fields['59'] == 'Consultorio de Psicologia'
        assert fields['60'] == 'SAO JOSE DOS CA'

    def test_description(self):
        payload = PixPaymentGenerator.generate_payload(
            key='k',
            merchant_name='Ana',
            merchant_city='Rio',
            description='Sessão',
        )

        assert parse_tlv(payload)['26'].endswith('0206Sessao')

    def test_key_required(self):
        with pytest.raises(PixGenerationError):
            PixPaymentGenerator.generate_payload(key=' ', merchant_name='Ana', merchant_city='Rio')

    def test_name_required(self):
        with pytest.raises(PixGenerationError):
            PixPaymentGenerator.generate_payload(key='k', merchant_name='', merchant_city='Rio')


class TestQrImage:

    def test_base64_png(self):
        encoded = PixPaymentGenerator.qr_image_base64('000201')

        assert base64.b64decode(encoded).startswith(b'\x89PNG')


@pytest.mark.django_db
class TestGenerateForPayment:

    def test_requires_pix_key(self, payment):
        with pytest.raises(PixConfigurationError):
            PixPaymentGenerator.generate_for_payment(payment)

    def test_stores_payload(self, therapist, payment):
        therapist.pix_key = 'therapist@example.com'
        therapist.pix_merchant_name = 'Dra Ana'
        therapist.save()
        payment.owner.refresh_from_db()

        payload = PixPaymentGenerator.generate_for_payment(payment, merchant_city='Curitiba')
        fields = parse_tlv(payload)

        payment.refresh_from_db()
        assert payment.pix_payload == payload
        assert fields['54'] == '150.00'
        assert fields['59'] == 'Dra Ana'
        assert fields['60'] == 'CURITIBA'
        assert fields['62'] == f'05{len(payment.reference):02d}{payment.reference}'

    def test_falls_back_to_display_name(self, therapist, payment):
        therapist.pix_key = 'therapist@example.com'
        therapist.save()
        payment.owner.refresh_from_db()

        payload = PixPaymentGenerator.generate_for_payment(payment)

        assert parse_tlv(payload)['59'] == 'Therapist'
