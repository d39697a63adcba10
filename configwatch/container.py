"""Dependency injection container for the application."""
from dependency_injector import containers, providers
import requests

from configwatch.services.backoff import ExponentialBackoff
from configwatch.services.change_dispatcher import ChangeDispatcher
from configwatch.services.config_client import ConfigClient
from configwatch.services.config_refresher import ConfigRefresher
from configwatch.services.http_service import HttpService
from configwatch.services.listener_registry import InMemoryListenerRegistry
from configwatch.services.parser_factory import ParserFactory
from configwatch.services.poll_supervisor import PollLoopSupervisor
from configwatch.services.remote_gateway import ApolloHttpGateway
from configwatch.services.snapshot_cache import SnapshotCache
from configwatch import config as env


# Environment variables used by the container (read via `configwatch.config` helpers).
#
# CONFIGWATCH_SERVER_URL (str, default: "http://localhost:8080")
#   Base URL of the config service (serves /configs and /notifications/v2).
#
# CONFIGWATCH_META_SERVER_URL (str, optional)
#   Apollo meta server; when set, the config-service URL is looked up from its
#   /services/config listing and CONFIGWATCH_SERVER_URL is not used.
#
# CONFIGWATCH_APP_ID (str, default: "SampleApp")
# CONFIGWATCH_CLUSTER (str, default: "default")
#   Application id and cluster every request is scoped to.
#
# CONFIGWATCH_NAMESPACE (str, default: "application")
#   Namespace used by `get_internal_property` when none is given.
#
# CONFIGWATCH_WATCH_NAMESPACES (comma-separated, default: the default namespace)
#   Namespaces `run.py` registers a logging listener on at startup.
#
# CONFIGWATCH_POLL_TIMEOUT (float seconds, default: 60)
#   Long-poll timeout; also bounds how long a stop request waits to be observed.
#
# CONFIGWATCH_HTTP_TIMEOUT (float seconds, default: 10)
#   Timeout for ordinary (non long-poll) requests.
#
# CONFIGWATCH_BACKOFF_INITIAL / CONFIGWATCH_BACKOFF_MAX (float seconds, default: 1 / 60)
#   Bounds of the exponential delay after a failed poll or fetch.
#
# USER_AGENT (str, default: "configwatch/0.1")
#
# CONFIGWATCH_API_PORT (int, default: 8000)
#   Port of the status API served by `run.py`.
ENV = {
    "CONFIGWATCH_SERVER_URL": env.get_str_env("CONFIGWATCH_SERVER_URL", "http://localhost:8080"),
    "CONFIGWATCH_META_SERVER_URL": env.get_optional_str_env("CONFIGWATCH_META_SERVER_URL"),
    "CONFIGWATCH_APP_ID": env.get_str_env("CONFIGWATCH_APP_ID", "SampleApp"),
    "CONFIGWATCH_CLUSTER": env.get_str_env("CONFIGWATCH_CLUSTER", "default"),
    "CONFIGWATCH_NAMESPACE": env.get_str_env("CONFIGWATCH_NAMESPACE", "application"),
    "CONFIGWATCH_WATCH_NAMESPACES": env.get_list_env("CONFIGWATCH_WATCH_NAMESPACES"),
    "CONFIGWATCH_POLL_TIMEOUT": env.get_float_env("CONFIGWATCH_POLL_TIMEOUT", 60.0),
    "CONFIGWATCH_HTTP_TIMEOUT": env.get_float_env("CONFIGWATCH_HTTP_TIMEOUT", 10.0),
    "CONFIGWATCH_BACKOFF_INITIAL": env.get_float_env("CONFIGWATCH_BACKOFF_INITIAL", 1.0),
    "CONFIGWATCH_BACKOFF_MAX": env.get_float_env("CONFIGWATCH_BACKOFF_MAX", 60.0),
    "USER_AGENT": env.get_str_env("USER_AGENT", "configwatch/0.1"),
    "CONFIGWATCH_API_PORT": env.get_int_env("CONFIGWATCH_API_PORT", 8000),
}


class Container(containers.DeclarativeContainer):
    """Dependency injection container for the configwatch client."""

    # Configuration
    config = providers.Configuration(default=ENV)

    http_service = providers.Singleton(
        HttpService,
        user_agent=config.USER_AGENT.as_(str),
        http_client=providers.Object(requests.get),
        timeout=config.CONFIGWATCH_HTTP_TIMEOUT.as_(float),
    )

    gateway = providers.Singleton(
        ApolloHttpGateway,
        http_service=http_service,
        server_url=config.CONFIGWATCH_SERVER_URL.as_(str),
        app_id=config.CONFIGWATCH_APP_ID.as_(str),
        cluster=config.CONFIGWATCH_CLUSTER.as_(str),
        meta_server_url=config.CONFIGWATCH_META_SERVER_URL,
    )

    snapshot_cache = providers.Singleton(SnapshotCache)

    listener_registry = providers.Singleton(InMemoryListenerRegistry)

    parser_factory = providers.Singleton(ParserFactory)

    dispatcher = providers.Singleton(
        ChangeDispatcher,
        registry=listener_registry,
    )

    refresher = providers.Singleton(
        ConfigRefresher,
        gateway=gateway,
        cache=snapshot_cache,
        parser_factory=parser_factory,
        dispatcher=dispatcher,
    )

    # Each poll loop builds its own backoff from this factory.
    backoff = providers.Factory(
        ExponentialBackoff,
        initial_seconds=config.CONFIGWATCH_BACKOFF_INITIAL.as_(float),
        max_seconds=config.CONFIGWATCH_BACKOFF_MAX.as_(float),
    )

    poll_supervisor = providers.Singleton(
        PollLoopSupervisor,
        gateway=gateway,
        refresher=refresher,
        cache=snapshot_cache,
        poll_timeout=config.CONFIGWATCH_POLL_TIMEOUT.as_(float),
        backoff_factory=backoff.provider,
    )

    config_client = providers.Singleton(
        ConfigClient,
        registry=listener_registry,
        cache=snapshot_cache,
        refresher=refresher,
        supervisor=poll_supervisor,
        parser_factory=parser_factory,
        default_namespace=config.CONFIGWATCH_NAMESPACE.as_(str),
    )
