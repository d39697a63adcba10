import logging

from fastapi import APIRouter, HTTPException, Response

from configwatch.exceptions import NotFoundError, ParseError, PropertyNotFoundError, TransportError

logger = logging.getLogger(__name__)


def _status_dict(status):
    return {
        "state": status.state.value,
        "last_token": status.last_token,
        "consecutive_failures": status.consecutive_failures,
        "started_at": status.started_at.isoformat() if status.started_at else None,
        "last_refresh_at": status.last_refresh_at.isoformat() if status.last_refresh_at else None,
        "last_error": status.last_error,
    }


def create_namespaces_router(config_client):
    router = APIRouter(prefix="/namespaces", tags=["Namespaces"])

    @router.get("/")
    def list_namespaces():
        names = sorted(set(config_client.watched_namespaces()) | set(config_client.cached_namespaces()))
        return [
            {
                "namespace": name,
                "listeners": config_client.listener_count(name),
                "poller": _status_dict(config_client.poller_status(name)),
            }
            for name in names
        ]

    @router.get("/{namespace}/properties")
    def get_properties(namespace: str):
        try:
            content = config_client.get_properties(namespace)
        except NotFoundError:
            raise HTTPException(status_code=404, detail="namespace not found")
        except TransportError:
            logger.exception("Could not load namespace %s", namespace)
            raise HTTPException(status_code=502, detail="config service unavailable")
        except ParseError as e:
            logger.warning("Namespace %s could not be parsed: %s", namespace, e.reason)
            raise HTTPException(status_code=502, detail="namespace content could not be parsed")
        return Response(content=content, media_type="text/plain")

    @router.get("/{namespace}/properties/{key}")
    def get_property(namespace: str, key: str):
        try:
            value = config_client.get_internal_property(key, namespace=namespace)
        except (NotFoundError, PropertyNotFoundError):
            raise HTTPException(status_code=404, detail="property not found")
        except TransportError:
            logger.exception("Could not load namespace %s", namespace)
            raise HTTPException(status_code=502, detail="config service unavailable")
        except ParseError as e:
            logger.warning("Namespace %s could not be parsed: %s", namespace, e.reason)
            raise HTTPException(status_code=502, detail="namespace content could not be parsed")
        return {"namespace": namespace, "key": key, "value": value}

    return router
