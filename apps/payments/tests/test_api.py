import pytest
from django.urls import reverse
from rest_framework import status
from apps.payments.models import Payment, PaymentStatus


@pytest.mark.django_db
class TestPaymentApi:
    """Tests for /api/payments/"""

    def test_create_manual_charge(self, authenticated_client, patient):
        response = authenticated_client.post(reverse('payments:payment-list'), {
            'client': str(patient.id),
            'amount': '75.50',
            'due_date': '2026-03-10',
            'notes': 'Report',
        })

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['status'] == 'pending'
        assert response.data['amount'] == '75.50'
        assert response.data['session_date'] is None

    def test_create_rejects_zero_amount(self, authenticated_client, patient):
        response = authenticated_client.post(reverse('payments:payment-list'), {
            'client': str(patient.id),
            'amount': '0.00',
        })

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_list_filters(self, authenticated_client, therapist, patient, payment):
        Payment.objects.create(owner=therapist, client=patient, amount='10.00', status=PaymentStatus.PAID)

        response = authenticated_client.get(reverse('payments:payment-list'), {'status': 'paid'})
        assert response.data['count'] == 1

        response = authenticated_client.get(reverse('payments:payment-list'), {'due_from': '2026-03-01', 'due_to': '2026-03-05'})
        assert response.data['count'] == 1
        assert response.data['results'][0]['id'] == str(payment.id)

    def test_delete_not_allowed(self, authenticated_client, payment):
        response = authenticated_client.delete(reverse('payments:payment-detail', args=[payment.id]))

        assert response.status_code == status.HTTP_405_METHOD_NOT_ALLOWED

    def test_patch(self, authenticated_client, payment):
        response = authenticated_client.patch(
            reverse('payments:payment-detail', args=[payment.id]),
            {'method': 'cash', 'amount': '1.00'},
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['method'] == 'cash'
        assert response.data['amount'] == '150.00'

    def test_mark_paid(self, authenticated_client, payment):
        url = reverse('payments:payment-mark-paid', args=[payment.id])

        response = authenticated_client.post(url, {'method': 'pix'})
        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == 'paid'

        response = authenticated_client.post(url)
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_cancel_and_refund(self, authenticated_client, payment):
        response = authenticated_client.post(reverse('payments:payment-refund', args=[payment.id]))
        assert response.status_code == status.HTTP_400_BAD_REQUEST

        response = authenticated_client.post(reverse('payments:payment-cancel', args=[payment.id]))
        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == 'cancelled'

    def test_pix_requires_key(self, authenticated_client, payment):
        response = authenticated_client.post(reverse('payments:payment-pix', args=[payment.id]))

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'PIX key' in response.data['error']

    def test_pix_charge(self, authenticated_client, therapist, payment):
        therapist.pix_key = 'therapist@example.com'
        therapist.save()

        response = authenticated_client.post(reverse('payments:payment-pix', args=[payment.id]))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['reference'] == payment.reference
        assert response.data['payload'].startswith('000201')
        assert response.data['qr_code_base64']

    def test_pix_for_paid_payment(self, authenticated_client, therapist, payment):
        therapist.pix_key = 'therapist@example.com'
        therapist.save()
        payment.mark_paid()

        response = authenticated_client.post(reverse('payments:payment-pix', args=[payment.id]))

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_outstanding(self, authenticated_client, payment):
        response = authenticated_client.get(reverse('payments:payment-outstanding'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['total_outstanding'] == '150.00'
        assert response.data['count'] == 1

    def test_outstanding_foreign_client(self, authenticated_client, foreign_patient):
        response = authenticated_client.get(reverse('payments:payment-outstanding'), {'client': str(foreign_patient.id)})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_other_owner_not_found(self, authenticated_client, other_therapist, foreign_patient):
        foreign = Payment.objects.create(owner=other_therapist, client=foreign_patient, amount='10.00')

        response = authenticated_client.post(reverse('payments:payment-mark-paid', args=[foreign.id]))

        assert response.status_code == status.HTTP_404_NOT_FOUND
