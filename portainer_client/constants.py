"""Centralized constants for the Portainer client."""

# Creation / verification defaults
DEFAULT_MAX_RETRY_COUNT = 3
DEFAULT_VERIFY_TIMEOUT_MS = 5000
DEFAULT_POLL_INTERVAL_MS = 1000
DEFAULT_SETTLE_DELAY_MS = 1000
DEFAULT_HTTP_TIMEOUT_SECONDS = 30.0
DEFAULT_RESTART_TIMEOUT_MS = 10000
DEFAULT_KILL_SIGNAL = "SIGKILL"

# Stack types accepted by /api/stacks/create (2 = standalone compose)
STACK_TYPE_COMPOSE = 2

# Result record method for directly created containers
CONTAINER_CREATE_METHOD = "direct-container"

# Container name separator prefixed by the Docker engine
CONTAINER_NAME_PREFIX = "/"

# API paths
ENDPOINTS_PATH = "/api/endpoints"
STACKS_PATH = "/api/stacks"
STATUS_PATH = "/api/system/status"
STACK_CREATE_PATH = "/api/stacks/create/standalone/string"
DOCKER_PROXY_PATH = "/api/endpoints/{env_id}/docker"

# HTTP
API_KEY_HEADER = "X-API-Key"
CONTENT_TYPE_JSON = "application/json"

# Environment Variables
ENV_PORTAINER_URL = "PORTAINER_URL"
ENV_PORTAINER_API_KEY = "PORTAINER_API_KEY"
ENV_CLIENT_CONFIG = "PORTAINER_CLIENT_CONFIG"

# Logging
LOGGER_NAME = "portainer_client"
LOG_INIT_MESSAGE = "Logging system initialized"
HTTPS_MISMATCH_MARKER = "Client sent an HTTP request to an HTTPS server"
