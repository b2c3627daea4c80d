import uuid

import pytest
from django.urls import reverse
from rest_framework import status
from apps.clients.models import Client


@pytest.mark.django_db
class TestClientList:
    """Tests for GET /api/clients/"""

    def test_list_only_own_clients(self, authenticated_client, patient, foreign_patient):
        response = authenticated_client.get(reverse('clients:client-list'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 1
        assert response.data['results'][0]['name'] == 'Carla Mendes'
        assert 'clinical_notes' not in response.data['results'][0]

    def test_search(self, authenticated_client, therapist, patient):
        Client.objects.create(owner=therapist, name='Daniel Rocha')

        response = authenticated_client.get(reverse('clients:client-list'), {'search': 'rocha'})

        assert response.data['count'] == 1
        assert response.data['results'][0]['name'] == 'Daniel Rocha'

    def test_filter_inactive(self, authenticated_client, therapist, patient):
        Client.objects.create(owner=therapist, name='Gone', is_active=False)

        response = authenticated_client.get(reverse('clients:client-list'), {'is_active': 'false'})

        assert response.data['count'] == 1
        assert response.data['results'][0]['name'] == 'Gone'

    def test_unauthenticated(self, api_client):
        response = api_client.get(reverse('clients:client-list'))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.django_db
class TestClientCreate:
    """Tests for POST /api/clients/"""

    def test_create(self, authenticated_client, therapist):
        response = authenticated_client.post(reverse('clients:client-list'), {
            'name': 'Elisa Prado',
            'email': 'Elisa@Example.com',
            'birth_date': '1990-05-01',
        })

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['email'] == 'elisa@example.com'
        assert Client.objects.get(id=response.data['id']).owner == therapist

    def test_duplicate_email(self, authenticated_client, patient):
        response = authenticated_client.post(reverse('clients:client-list'), {
            'name': 'Copy',
            'email': patient.email,
        })

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'error' in response.data

    def test_name_required(self, authenticated_client):
        response = authenticated_client.post(reverse('clients:client-list'), {'email': 'x@example.com'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.django_db
class TestClientDetail:
    """Tests for /api/clients/{id}/"""

    def test_retrieve_with_clinical_record(self, authenticated_client, patient):
        response = authenticated_client.get(reverse('clients:client-detail', args=[patient.id]))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['clinical_notes'] == 'Anxiety'

    def test_other_owner_is_not_found(self, authenticated_client, foreign_patient):
        response = authenticated_client.get(reverse('clients:client-detail', args=[foreign_patient.id]))

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_unknown_id(self, authenticated_client):
        response = authenticated_client.get(reverse('clients:client-detail', args=[uuid.uuid4()]))

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_partial_update(self, authenticated_client, patient):
        response = authenticated_client.patch(
            reverse('clients:client-detail', args=[patient.id]),
            {'phone': '+55 11 90000-0000'},
        )

        assert response.status_code == status.HTTP_200_OK
        patient.refresh_from_db()
        assert patient.phone == '+55 11 90000-0000'

    def test_delete_is_soft(self, authenticated_client, patient):
        response = authenticated_client.delete(reverse('clients:client-detail', args=[patient.id]))

        assert response.status_code == status.HTTP_204_NO_CONTENT
        patient.refresh_from_db()
        assert patient.is_active is False

    def test_reactivate(self, authenticated_client, patient):
        patient.is_active = False
        patient.save()

        response = authenticated_client.post(reverse('clients:client-reactivate', args=[patient.id]))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['is_active'] is True

    def test_summary(self, authenticated_client, patient):
        response = authenticated_client.get(reverse('clients:client-summary', args=[patient.id]))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['client']['id'] == str(patient.id)
        assert response.data['sessions_total'] == 0
        assert response.data['total_paid'] == '0.00'
