"""
Data access layer for projects.
"""
from typing import Any, Dict, Iterable, List, Optional

from boto3.dynamodb.conditions import Attr

from .base_model import DynamoModel
from .database import PROJECTS_TBL


class ProjectModel(DynamoModel):
    """Projects keyed by projectID; each optionally belongs to a client"""

    key_name = "projectID"
    default_table = PROJECTS_TBL

    def list_all(self) -> List[Dict[str, Any]]:
        return self._scan_all()

    def list_for_client(self, client_id: str) -> List[Dict[str, Any]]:
        return self._scan_all(FilterExpression=Attr("clientID").eq(client_id))

    def get_many(self, project_ids: Iterable[str]) -> Dict[str, Dict[str, Any]]:
        """projectID -> record for the ids that exist."""
        out: Dict[str, Dict[str, Any]] = {}
        for project_id in sorted(set(project_ids)):
            item = self.get(project_id)
            if item:
                out[project_id] = item
        return out

    def code_exists(self, code: str, exclude_project_id: Optional[str] = None) -> bool:
        items = self._scan_all(FilterExpression=Attr("code").eq(code))
        return any(item.get("projectID") != exclude_project_id for item in items)
