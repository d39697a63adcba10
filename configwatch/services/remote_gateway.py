import json
import logging
import threading
from typing import Dict, Optional
from urllib.parse import quote

from configwatch.domain.snapshot import RemoteConfig
from configwatch.exceptions import NotFoundError, TransportError
from configwatch.services.content_parser import format_properties
from configwatch.services.http_service import HttpService

logger = logging.getLogger(__name__)

# Notification id the server treats as "tell me the current id right away".
INITIAL_NOTIFICATION_ID = -1

# Extra seconds on top of the long-poll timeout before the HTTP call gives up.
_LONG_POLL_GRACE_SECONDS = 5


class ApolloHttpGateway:
    """Remote config gateway speaking the Apollo config-service HTTP API.

    - `fetch_config` -> GET /configs/{app_id}/{cluster}/{namespace}
    - `await_change` -> GET /notifications/v2 (long-poll, 304 when nothing changed)

    With `meta_server_url` the config-service address is looked up once via
    GET {meta_server_url}/services/config and `server_url` is not used.
    """

    def __init__(
        self,
        http_service: HttpService,
        server_url: Optional[str],
        app_id: str,
        cluster: str = "default",
        meta_server_url: Optional[str] = None,
    ):
        if not server_url and not meta_server_url:
            raise ValueError("server_url or meta_server_url is required")
        if not app_id:
            raise ValueError("app_id is required")
        self._http = http_service
        self._meta_server_url = meta_server_url.rstrip("/") if meta_server_url else None
        self._server_url = None if self._meta_server_url else server_url.rstrip("/")
        self._app_id = app_id
        self._cluster = cluster or "default"
        self._lock = threading.Lock()

    @staticmethod
    def _remote_name(namespace: str) -> str:
        # Properties namespaces are addressed without their extension.
        if namespace.endswith(".properties"):
            return namespace[: -len(".properties")]
        return namespace

    def _base_url(self) -> str:
        with self._lock:
            if self._server_url is None:
                self._server_url = self._discover_config_service()
            return self._server_url

    def _discover_config_service(self) -> str:
        url = f"{self._meta_server_url}/services/config"
        resp = self._http.get(url, params={"appId": self._app_id})
        payload = _json_payload(resp, url)
        if isinstance(payload, list):
            for instance in payload:
                if isinstance(instance, dict) and instance.get("homepageUrl"):
                    home = str(instance["homepageUrl"]).rstrip("/")
                    logger.info("Using config service %s from meta server %s", home, self._meta_server_url)
                    return home
        raise TransportError(url, ValueError("meta server listed no config service"))

    def _configs_url(self, namespace: str) -> str:
        return "{}/configs/{}/{}/{}".format(
            self._base_url(),
            quote(self._app_id, safe=""),
            quote(self._cluster, safe=""),
            quote(self._remote_name(namespace), safe=""),
        )

    def fetch_config(self, namespace: str) -> RemoteConfig:
        url = self._configs_url(namespace)
        resp = self._http.get(url)
        if resp.status_code == 404:
            raise NotFoundError(namespace)
        payload = _json_payload(resp, url)
        if not isinstance(payload, dict):
            raise TransportError(url, ValueError("config payload is not an object"))

        configurations = payload.get("configurations") or {}
        if not isinstance(configurations, dict):
            raise TransportError(url, ValueError("configurations is not an object"))
        items = _as_flat_map(configurations)
        release_key = str(payload.get("releaseKey") or "")
        return RemoteConfig(
            raw_content=_render_raw_content(items),
            change_token=release_key,
            configurations=items,
        )

    def await_change(self, namespace: str, since_token: str, timeout: float) -> str:
        url = f"{self._base_url()}/notifications/v2"
        notifications = [{
            "namespaceName": self._remote_name(namespace),
            "notificationId": _as_notification_id(since_token),
        }]
        params = {
            "appId": self._app_id,
            "cluster": self._cluster,
            "notifications": json.dumps(notifications, separators=(",", ":")),
        }
        resp = self._http.get(url, params=params, timeout=timeout + _LONG_POLL_GRACE_SECONDS)
        if resp.not_modified:
            return since_token
        payload = _json_payload(resp, url)

        try:
            new_id = _find_notification_id(payload, self._remote_name(namespace))
        except (TypeError, ValueError) as e:
            raise TransportError(url, e) from e
        if new_id is None:
            logger.debug("No notification for %s in long-poll response", namespace)
            return since_token
        return str(new_id)


def _json_payload(resp, url: str):
    if not resp.ok:
        raise TransportError(url, RuntimeError(f"unexpected status {resp.status_code}"))
    try:
        return resp.json()
    except ValueError as e:
        raise TransportError(url, e) from e


def _as_notification_id(token: Optional[str]) -> int:
    """Tokens that are not notification ids (e.g. release keys) restart from the initial id."""
    if token is None:
        return INITIAL_NOTIFICATION_ID
    try:
        return int(token)
    except (TypeError, ValueError):
        return INITIAL_NOTIFICATION_ID


def _find_notification_id(payload, remote_name: str) -> Optional[int]:
    if not isinstance(payload, list):
        return None
    for item in payload:
        if not isinstance(item, dict):
            continue
        name = item.get("namespaceName")
        if name == remote_name or name == f"{remote_name}.properties":
            nid = item.get("notificationId")
            if nid is None:
                return None
            return int(nid)
    return None


def _as_flat_map(configurations: dict) -> Dict[str, str]:
    return {str(key): "" if value is None else str(value) for key, value in configurations.items()}


def _render_raw_content(items: Dict[str, str]) -> str:
    # Non-properties namespaces (yaml, json, xml) ship their text under a single `content` key.
    if set(items.keys()) == {"content"}:
        return items["content"]
    return format_properties(items)
