"""Minimal Asaas API client for outgoing transfers (PIX / TED)."""

import logging

import requests
from django.conf import settings

from .exceptions import AsaasAPIError, AsaasConfigurationError

logger = logging.getLogger(__name__)

ASAAS_BASE_URLS = {
    'production': 'https://api.asaas.com/v3',
    'sandbox': 'https://sandbox.asaas.com/api/v3',
}


class AsaasClient:
    """
    Asaas REST client.

    ``create_transfer`` returns the decoded JSON body for any HTTP status:
    Asaas reports business errors as ``{"errors": [{"description": ...}]}``.
    Transport failures raise AsaasAPIError.
    """

    def __init__(self, api_key=None, environment=None, timeout=None):
        self.api_key = api_key if api_key is not None else settings.ASAAS_API_KEY
        if not self.api_key:
            raise AsaasConfigurationError("ASAAS_API_KEY is not configured")

        environment = environment or settings.ASAAS_ENVIRONMENT
        self.base_url = ASAAS_BASE_URLS.get(environment, ASAAS_BASE_URLS['sandbox'])
        self.timeout = timeout or settings.ASAAS_TIMEOUT

    def _post(self, path, payload):
        try:
            response = requests.post(
                f"{self.base_url}{path}",
                json=payload,
                headers={
                    'access_token': self.api_key,
                    'Content-Type': 'application/json',
                },
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise AsaasAPIError(f"Could not reach Asaas: {e}")

        try:
            return response.json()
        except ValueError:
            raise AsaasAPIError(
                f"Unreadable Asaas response (HTTP {response.status_code})",
                status_code=response.status_code,
            )

    def create_transfer(self, payload: dict) -> dict:
        logger.info("Requesting Asaas %s transfer of R$ %.2f", payload.get('operationType'), payload.get('value', 0))
        return self._post('/transfers', payload)
