"""Collaborators the executors call out to: variables, store, files, connections."""

from stepflow.services.connections import ConnectionService, create_connection_service
from stepflow.services.files import FilesService, FilesServiceType, create_files_service
from stepflow.services.storage import ContextStore, create_context_store
from stepflow.services.variables import VariableService

__all__ = [
    "ConnectionService",
    "ContextStore",
    "FilesService",
    "FilesServiceType",
    "VariableService",
    "create_connection_service",
    "create_context_store",
    "create_files_service",
]
