"""REST client for the Protos internal API."""

from protoslib.client.executor import RequestExecutor
from protoslib.client.protos import ProtosClient
from protoslib.client.types import AppInfo, UserInfo

__all__ = ["AppInfo", "ProtosClient", "RequestExecutor", "UserInfo"]
