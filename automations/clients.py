"""
REST backend adapter for entity lists and the template catalog.

The recruitment dashboard's data lives behind a REST backend; this client
reads the six entity lists and the email templates from it with a shared
``requests`` session.
"""

import logging
from typing import Any, Dict, List, Optional

import requests
from django.conf import settings

from .catalog import ENTITY_RESOURCES, EntityKind
from .entities import EntitySnapshot, snapshot_from_payload
from .exceptions import CollaboratorFailure, EntityFetchError
from .ports import EntityProvider, TemplateProvider
from .rules import Template

logger = logging.getLogger(__name__)

TEMPLATES_RESOURCE = 'communications/email-templates'


class BackendRequestError(CollaboratorFailure):
    """The backend could not be reached or answered with an error status."""

    def __init__(self, message: str, status_code: Optional[int] = None, source: str = 'backend'):
        self.status_code = status_code
        super().__init__(message, source=source)


def _unwrap_list(payload: Any, resource: str) -> List[Dict[str, Any]]:
    """Backend list endpoints answer either a bare list or an envelope object."""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        key = resource.rsplit('/', 1)[-1]
        for candidate in ('data', key, 'results', 'items', 'templates'):
            value = payload.get(candidate)
            if isinstance(value, list):
                return value
    raise BackendRequestError(f'Unexpected response shape for {resource}')


class RecruitmentBackendClient(EntityProvider, TemplateProvider):
    """Entity and template provider backed by the dashboard's REST API."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: Optional[int] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = (base_url or settings.AUTOMATIONS_BACKEND_URL).rstrip('/')
        self.token = token if token is not None else getattr(settings, 'AUTOMATIONS_BACKEND_TOKEN', '')
        self.timeout = timeout or getattr(settings, 'AUTOMATIONS_BACKEND_TIMEOUT', 15)
        self._session = session

    @property
    def session(self) -> requests.Session:
        if self._session is None:
            self._session = requests.Session()
            self._session.headers.update({
                'User-Agent': 'RecruitOps-Automations/1.0',
                'Accept': 'application/json',
            })
        return self._session

    def get_headers(self) -> Dict[str, str]:
        if self.token:
            return {'Authorization': f'Bearer {self.token}'}
        return {}

    def get_json(self, resource: str) -> Any:
        url = f"{self.base_url}/{resource.lstrip('/')}"
        try:
            response = self.session.get(url, headers=self.get_headers(), timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"Backend request to {url} failed: {e}")
            raise BackendRequestError(f'Request failed: {e}', source=resource)

        if response.status_code >= 400:
            logger.error(f"Backend request to {url} returned {response.status_code}")
            raise BackendRequestError(
                f'{resource} returned HTTP {response.status_code}',
                status_code=response.status_code,
                source=resource,
            )
        try:
            return response.json()
        except ValueError:
            raise BackendRequestError(f'{resource} returned invalid JSON', source=resource)

    def fetch_entity_list(self, kind: EntityKind) -> List[EntitySnapshot]:
        kind = EntityKind(kind)
        resource = ENTITY_RESOURCES[kind]
        try:
            rows = _unwrap_list(self.get_json(resource), resource)
        except BackendRequestError as e:
            raise EntityFetchError(e.message, kind=kind) from e
        return [snapshot_from_payload(kind, row) for row in rows if isinstance(row, dict)]

    def fetch_templates(self) -> List[Template]:
        rows = _unwrap_list(self.get_json(TEMPLATES_RESOURCE), TEMPLATES_RESOURCE)
        return [Template.from_payload(row) for row in rows if isinstance(row, dict)]
