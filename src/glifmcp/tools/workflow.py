"""
Workflow tools for glif-mcp.

This module provides the core tools that are always available:
- run_glif: Run a workflow and encode its output as content blocks
- glif_info: Show a workflow's inputs and recent runs

It also provides WorkflowBindingTool, the synthetic tool behind saved
bindings and environment-configured ids. Those tools take only an inputs
array and run one fixed workflow.
"""

from pydantic import Field

from glifmcp.api import call_upstream
from glifmcp.media.encoder import ContentBlock, structured_content
from glifmcp.tools.base import Tool, ToolArgs, ToolContext, ToolResult, text_content
from glifmcp.tools.formatting import format_workflow_details


class WorkflowInputsArgs(ToolArgs):
    inputs: list[str] = Field(..., description="Array of input values for the glif")


class RunWorkflowArgs(ToolArgs):
    id: str = Field(..., description="The ID of the glif to run")
    inputs: list[str] = Field(..., description="Array of input values for the glif")


class WorkflowIdArgs(ToolArgs):
    id: str = Field(..., description="The ID of the glif to show details for")


async def run_workflow(context: ToolContext, workflow_id: str, inputs: list[str]) -> ToolResult:
    """Run a workflow and pass its output through the media encoder."""
    api = context.require_api()
    result = await call_upstream("run", api.run(workflow_id, inputs))
    payload = result.to_payload()
    return ToolResult(
        content=await context.encoder.encode(payload),
        structured=structured_content(payload),
    )


class RunWorkflowTool(Tool):
    """Run a glif by id."""

    args_model = RunWorkflowArgs

    @property
    def name(self) -> str:
        return "run_glif"

    @property
    def description(self) -> str:
        return "Run a glif with the specified ID and inputs"

    async def execute(self, args: RunWorkflowArgs, context: ToolContext) -> ToolResult:
        return await run_workflow(context, args.id, args.inputs)


class WorkflowInfoTool(Tool):
    """Describe a glif's input fields and recent runs."""

    args_model = WorkflowIdArgs

    @property
    def name(self) -> str:
        return "glif_info"

    @property
    def description(self) -> str:
        return "Get detailed information about a glif including input fields"

    async def execute(self, args: WorkflowIdArgs, context: ToolContext) -> list[ContentBlock]:
        api = context.require_api()
        details = await call_upstream("get_details", api.get_details(args.id))
        return text_content(format_workflow_details(details))


class WorkflowBindingTool(Tool):
    """
    A tool bound to one workflow id.

    Created per request from a saved binding or a configured id; never
    registered in a group.

    Attributes:
        workflow_id: The workflow every call runs
    """

    args_model = WorkflowInputsArgs

    def __init__(self, tool_name: str, workflow_id: str, description: str) -> None:
        self._name = tool_name
        self._description = description
        self.workflow_id = workflow_id

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description

    async def execute(self, args: WorkflowInputsArgs, context: ToolContext) -> ToolResult:
        return await run_workflow(context, self.workflow_id, args.inputs)
