"""
Read-only MCP resources for glif-mcp.

Three URI templates expose upstream records as JSON documents:

    glif://{id}       a workflow's metadata
    glifRun://{id}    one past run
    glifUser://{id}   a public user profile

The id is the URI authority. Scheme matching ignores case, since URL
parsers lower-case schemes.
"""

import json
import logging
from urllib.parse import urlparse

from mcp import types
from pydantic import BaseModel

from glifmcp.api import WorkflowApi, call_upstream
from glifmcp.errors import ResourceNotSupportedError, UpstreamError

logger = logging.getLogger(__name__)

JSON_MIME_TYPE = "application/json"

RESOURCE_TEMPLATES = [
    types.ResourceTemplate(
        uriTemplate="glif://{id}",
        name="Glif Details",
        description="Get metadata about a specific glif",
        mimeType=JSON_MIME_TYPE,
    ),
    types.ResourceTemplate(
        uriTemplate="glifRun://{id}",
        name="Glif Run Details",
        description="Get details about a specific glif run",
        mimeType=JSON_MIME_TYPE,
    ),
    types.ResourceTemplate(
        uriTemplate="glifUser://{id}",
        name="Glif User Details",
        description="Get details about a glif user",
        mimeType=JSON_MIME_TYPE,
    ),
]


def to_json_text(model: BaseModel) -> str:
    """Serialize an upstream model with its wire keys, pretty-printed."""
    return json.dumps(model.model_dump(mode="json", by_alias=True), indent=2, ensure_ascii=False)


class ResourceReader:
    """
    Resolves glif resource URIs against the workflow API.

    Usage:
        reader = ResourceReader(api=client)
        text = await reader.read("glif://cm2abc")
    """

    def __init__(self, api: WorkflowApi | None = None) -> None:
        self.api = api

    def templates(self) -> list[types.ResourceTemplate]:
        return list(RESOURCE_TEMPLATES)

    async def read(self, uri: str) -> str:
        """
        Fetch the record a resource URI names, as JSON text.

        Raises:
            ResourceNotSupportedError: If the scheme is unknown or the id missing
            UpstreamError: If the API call fails
        """
        parsed = urlparse(uri)
        scheme = parsed.scheme.lower()
        resource_id = parsed.netloc
        if not resource_id or scheme not in ("glif", "glifrun", "glifuser"):
            raise ResourceNotSupportedError(uri=uri)
        if self.api is None:
            raise UpstreamError(
                operation="connect",
                underlying_error="No workflow API client configured",
            )

        logger.debug("Reading %s resource %s", scheme, resource_id)
        if scheme == "glif":
            details = await call_upstream("get_details", self.api.get_details(resource_id))
            return to_json_text(details.workflow)
        if scheme == "glifrun":
            run = await call_upstream("get_run", self.api.get_run(resource_id))
            return to_json_text(run)
        user = await call_upstream("get_user", self.api.get_user(resource_id))
        return to_json_text(user)
