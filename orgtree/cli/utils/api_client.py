"""API client for the OrgTree CLI."""

import json
from typing import Any, Dict, List, Optional
from urllib.parse import quote, urljoin

import httpx
from rich.console import Console

console = Console(stderr=True)

API_PREFIX = "/api/v1"


class APIError(Exception):
    """API error exception."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[Dict] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.details = details


def _segment(value: str) -> str:
    return quote(value, safe="")


class APIClient:
    """HTTP client for the OrgTree API."""

    def __init__(
        self,
        base_url: str,
        uid: Optional[str] = None,
        debug: bool = False,
        http_client: Optional[httpx.Client] = None,
    ):
        """
        Initialize API client.

        Args:
            base_url: Base URL of the OrgTree service
            uid: Acting principal sent in the uid header
            debug: Enable debug output
            http_client: Existing client to send requests through; it is
                not closed by this object
        """
        self.base_url = base_url.rstrip("/")
        self.uid = uid
        self.debug = debug

        self.headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if uid:
            self.headers["uid"] = uid

        self._owns_client = http_client is None
        self.client = http_client or httpx.Client(
            base_url=self.base_url,
            headers=self.headers,
            timeout=30.0,
        )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        """Close HTTP client."""
        if self._owns_client:
            self.client.close()

    def _log_debug(self, message: str):
        """Log debug message if debug mode is enabled."""
        if self.debug:
            console.print(f"[dim]DEBUG: {message}[/dim]")

    def _handle_response(self, response: httpx.Response) -> Any:
        """
        Handle API response.

        Args:
            response: HTTP response

        Returns:
            Response data

        Raises:
            APIError: If request failed
        """
        self._log_debug(f"Response status: {response.status_code}")

        if response.status_code == 204:
            return None

        try:
            data = response.json() if response.content else None
        except json.JSONDecodeError:
            data = None

        if response.is_error:
            error_message = "API request failed"

            if data and isinstance(data, dict):
                error_message = data.get("message", data.get("detail", error_message))

            raise APIError(
                message=str(error_message), status_code=response.status_code, details=data
            )

        return data

    def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json_data: Optional[Dict[str, Any]] = None,
        **kwargs,
    ) -> Any:
        """
        Make API request.

        Args:
            method: HTTP method
            path: API path
            params: Query parameters
            json_data: JSON request body
            **kwargs: Additional request arguments

        Returns:
            Response data
        """
        url = urljoin(self.base_url + "/", path.lstrip("/"))

        self._log_debug(f"{method} {url}")
        if params:
            self._log_debug(f"Params: {params}")
        if json_data:
            self._log_debug(f"Body: {json_data}")

        try:
            response = self.client.request(
                method=method,
                url=url,
                params=params,
                json=json_data,
                headers=self.headers,
                **kwargs,
            )
        except httpx.HTTPError as e:
            raise APIError(f"Cannot reach {self.base_url}: {e}") from e

        return self._handle_response(response)

    def get(self, path: str, params: Optional[Dict[str, Any]] = None, **kwargs) -> Any:
        """Make GET request."""
        return self.request("GET", path, params=params, **kwargs)

    def post(
        self, path: str, json_data: Optional[Dict[str, Any]] = None, **kwargs
    ) -> Any:
        """Make POST request."""
        return self.request("POST", path, json_data=json_data, **kwargs)

    def delete(self, path: str, params: Optional[Dict[str, Any]] = None, **kwargs) -> Any:
        """Make DELETE request."""
        return self.request("DELETE", path, params=params, **kwargs)

    # Organization operations
    def _org_path(self, branch: str, org: Optional[str] = None) -> str:
        path = f"{API_PREFIX}/branches/{_segment(branch)}/organizations"
        if org is not None:
            path += f"/{_segment(org)}"
        return path

    def list_organizations(
        self, branch: str, name: Optional[str] = None, nested: bool = False
    ) -> List[Dict[str, Any]]:
        """List visible organizations."""
        params: Dict[str, Any] = {"nested": str(nested).lower()}
        if name:
            params["name"] = name
        response = self.get(self._org_path(branch), params=params)
        return response.get("data", []) if response else []

    def create_organization(self, branch: str, name: str) -> Dict[str, Any]:
        """Create organization."""
        response = self.post(self._org_path(branch), json_data={"name": name})
        return response["data"]

    def create_sub_organization(self, branch: str, parent: str, name: str) -> Dict[str, Any]:
        """Create sub-organization."""
        response = self.post(
            f"{self._org_path(branch, parent)}/sub-organizations", json_data={"name": name}
        )
        return response["data"]

    def list_org_admins(self, branch: str, org: str) -> List[str]:
        response = self.get(f"{self._org_path(branch, org)}/admins")
        return response.get("data", []) if response else []

    def add_org_admin(self, branch: str, org: str, uid: str) -> Dict[str, Any]:
        return self.post(f"{self._org_path(branch, org)}/admins", json_data={"uid": uid})

    def remove_org_admin(self, branch: str, org: str, uid: str) -> Dict[str, Any]:
        return self.delete(f"{self._org_path(branch, org)}/admins", params={"uid": uid})

    def reconcile_organization(self, branch: str, org: str) -> Dict[str, Any]:
        response = self.post(f"{self._org_path(branch, org)}/reconcile")
        return response["data"]

    # Group operations
    def _group_path(self, branch: str, org: str, group: str) -> str:
        return f"{self._org_path(branch, org)}/groups/{_segment(group)}"

    def list_groups(self, branch: str) -> List[Dict[str, Any]]:
        """List visible groups."""
        response = self.get(f"{API_PREFIX}/branches/{_segment(branch)}/groups")
        return response.get("data", []) if response else []

    def get_group(self, branch: str, org: str, group: str) -> Dict[str, Any]:
        response = self.get(self._group_path(branch, org, group))
        return response["data"]

    def create_group(self, branch: str, org: str, name: str) -> Dict[str, Any]:
        """Create group."""
        response = self.post(
            f"{API_PREFIX}/branches/{_segment(branch)}/groups",
            json_data={"name": name, "organization": org},
        )
        return response["data"]

    def list_group_admins(self, branch: str, org: str, group: str) -> List[str]:
        response = self.get(f"{self._group_path(branch, org, group)}/admins")
        return response.get("data", []) if response else []

    def add_group_admin(self, branch: str, org: str, group: str, uid: str) -> Dict[str, Any]:
        return self.post(
            f"{self._group_path(branch, org, group)}/admins", json_data={"uid": uid}
        )

    def remove_group_admin(self, branch: str, org: str, group: str, uid: str) -> Dict[str, Any]:
        return self.delete(
            f"{self._group_path(branch, org, group)}/admins", params={"uid": uid}
        )

    def list_group_members(self, branch: str, org: str, group: str) -> List[str]:
        response = self.get(f"{self._group_path(branch, org, group)}/members")
        return response.get("data", []) if response else []

    def add_group_member(self, branch: str, org: str, group: str, uid: str) -> Dict[str, Any]:
        return self.post(
            f"{self._group_path(branch, org, group)}/members", json_data={"uid": uid}
        )

    def remove_group_member(self, branch: str, org: str, group: str, uid: str) -> Dict[str, Any]:
        return self.delete(
            f"{self._group_path(branch, org, group)}/members", params={"uid": uid}
        )

    def reconcile_group(self, branch: str, org: str, group: str) -> Dict[str, Any]:
        response = self.post(f"{self._group_path(branch, org, group)}/reconcile")
        return response["data"]
