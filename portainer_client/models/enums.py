"""Enum definitions for Portainer client operations."""

from enum import Enum


class ErrorKind(Enum):
    """Failure categories carried by ``Result``."""

    PRECONDITION = "precondition"
    NOT_FOUND = "not_found"
    TRANSPORT = "transport"
    EXHAUSTED = "exhausted"
    CONFIGURATION = "configuration"


class ContainerAction(Enum):
    """Lifecycle actions accepted by ``ContainerControls.handle_container``."""

    START = "start"
    STOP = "stop"
    REMOVE = "remove"
    KILL = "kill"
    PAUSE = "pause"
    UNPAUSE = "unpause"
    RESTART = "restart"
