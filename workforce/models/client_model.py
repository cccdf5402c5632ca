"""
Data access layer for clients.
"""
from typing import Any, Dict, List

from boto3.dynamodb.conditions import Attr

from .base_model import DynamoModel
from .database import CLIENTS_TBL


class ClientModel(DynamoModel):
    """Clients keyed by clientID"""

    key_name = "clientID"
    default_table = CLIENTS_TBL

    def list_all(self) -> List[Dict[str, Any]]:
        return self._scan_all()

    def name_exists(self, name: str, exclude_client_id: str = None) -> bool:
        items = self._scan_all(FilterExpression=Attr("name").eq(name))
        return any(item.get("clientID") != exclude_client_id for item in items)
