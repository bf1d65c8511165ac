from logging import getLogger
from urllib.parse import urljoin

import requests
from django.utils.module_loading import import_string
from requests.adapters import HTTPAdapter
from requests.packages.urllib3.util.retry import Retry

from .config import DEFAULT_TOKEN_PROVIDER, traction_rec_setting
from .exceptions import TractionRecAuthError, TractionRecRequestError

logger = getLogger(__name__)


def requests_retry_session(
    retries=3,
    backoff_factor=2,
    status_forcelist=(429, 500, 502, 503, 504),
    session=None,
):
    session = session or requests.Session()
    retry = Retry(
        total=retries,
        read=retries,
        connect=retries,
        backoff_factor=backoff_factor,
        status_forcelist=status_forcelist,
    )
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    return session


def settings_token_provider():
    """
    Return the static access token from ``TRACTION_REC["ACCESS_TOKEN"]``.
    """
    token = traction_rec_setting("ACCESS_TOKEN")
    if not token:
        raise TractionRecAuthError("TRACTION_REC['ACCESS_TOKEN'] is not configured")
    return token


def get_token_provider():
    return import_string(
        traction_rec_setting("TOKEN_PROVIDER", DEFAULT_TOKEN_PROVIDER)
    )


def strip_attributes(record):
    """
    Remove the ``attributes`` metadata the REST API adds to every record and
    nested relationship.
    """
    return {
        key: strip_attributes(value) if isinstance(value, dict) else value
        for key, value in record.items()
        if key != "attributes"
    }


class TractionRecClient:
    """
    Minimal client for the Traction Rec (Salesforce) REST query API.

    ``token_provider`` is any callable returning a bearer token; it is called
    once per query so providers are free to refresh tokens.
    """

    def __init__(
        self, base_url, api_version, token_provider, session=None, timeout=60
    ):
        if not base_url:
            raise TractionRecRequestError("The Traction Rec base URL is not set")
        self.base_url = base_url.rstrip("/") + "/"
        self.api_version = api_version
        self.token_provider = token_provider
        self.session = session or requests_retry_session()
        self.timeout = timeout

    def __repr__(self):
        return "TractionRecClient(base_url=%s, api_version=%s)" % (
            self.base_url,
            self.api_version,
        )

    @classmethod
    def from_settings(cls, session=None):
        return cls(
            traction_rec_setting("BASE_URL"),
            traction_rec_setting("API_VERSION", "v59.0"),
            get_token_provider(),
            session=session,
            timeout=traction_rec_setting("REQUEST_TIMEOUT", 60),
        )

    @property
    def query_url(self):
        return urljoin(self.base_url, "services/data/%s/query/" % self.api_version)

    def _get(self, url, headers, params=None):
        try:
            resp = self.session.get(
                url, headers=headers, params=params, timeout=self.timeout
            )
        except requests.RequestException as exc:
            raise TractionRecRequestError("Request to %s failed: %s" % (url, exc))

        if resp.status_code == 401:
            raise TractionRecAuthError("Access token was rejected for %s" % url)
        if not resp.ok:
            raise TractionRecRequestError(
                "Request to %s returned HTTP %s: %s"
                % (url, resp.status_code, resp.text[:500])
            )

        try:
            return resp.json()
        except ValueError as exc:
            raise TractionRecRequestError(
                "Response from %s is not valid JSON: %s" % (url, exc)
            )

    def execute_query(self, soql):
        """
        Run a SOQL query and return every record, following pagination.
        """
        headers = {
            "Authorization": "Bearer %s" % self.token_provider(),
            "Accept": "application/json",
        }

        records = []
        data = self._get(self.query_url, headers, params={"q": soql})
        while True:
            records.extend(strip_attributes(r) for r in data.get("records", []))
            next_url = data.get("nextRecordsUrl")
            if data.get("done", True) or not next_url:
                break
            data = self._get(urljoin(self.base_url, next_url), headers)

        logger.debug("Query returned %d records: %s", len(records), soql)
        return records
