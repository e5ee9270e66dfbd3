"""Plain-text rendering of API objects for tool responses."""

from glifmcp.schema import Bot, SavedBinding, Workflow, WorkflowDetails, WorkflowUser


def format_workflow(workflow: Workflow) -> str:
    author = workflow.user.name if workflow.user else "unknown"
    runs = workflow.completed_run_count if workflow.completed_run_count is not None else 0
    return (
        f"{workflow.name} ({workflow.id})\n"
        f"{workflow.description or ''}\n"
        f"By: {author}\n"
        f"Runs: {runs}\n"
    )


def format_workflow_list(workflows: list[Workflow]) -> str:
    if not workflows:
        return "No glifs found."
    return "\n".join(format_workflow(w) for w in workflows)


def format_workflow_details(details: WorkflowDetails) -> str:
    workflow = details.workflow
    lines = [
        f"Name: {workflow.name}",
        f"Description: {workflow.description or ''}",
    ]
    if workflow.user:
        lines.append(f"Created by: {workflow.user.name} (@{workflow.user.username})")
    if workflow.completed_run_count is not None:
        lines.append(f"Runs: {workflow.completed_run_count}")
    if workflow.average_duration is not None:
        lines.append(f"Average Duration: {workflow.average_duration:g}ms")
    if workflow.output_type:
        lines.append(f"Output Type: {workflow.output_type}")

    lines += ["", "Input Fields:"]
    inputs = workflow.input_nodes
    lines += [f"- {node.name} ({node.type})" for node in inputs] or ["- none"]

    if details.recent_runs:
        lines += ["", "Recent Runs:"]
        for run in details.recent_runs:
            output = run.output or "No output"
            lines.append(f"- [{run.output_type or 'TEXT'}] {output}")
            for key, value in run.inputs.items():
                lines.append(f'  Input "{key}": {value}')
    return "\n".join(lines)


def format_user(user: WorkflowUser) -> str:
    lines = [f"User: {user.name} (@{user.username})", f"ID: {user.id}"]
    if user.bio:
        lines.append(f"Bio: {user.bio}")
    return "\n".join(lines)


def format_saved_binding(binding: SavedBinding) -> str:
    return (
        f"{binding.display_name or binding.tool_name} (tool: {binding.tool_name})\n"
        f"{binding.description}\n"
        f"Original Glif ID: {binding.source_id}\n"
        f"Saved: {binding.created_at:%Y-%m-%d %H:%M:%S %Z}\n"
    )


def format_bot(bot: Bot) -> str:
    lines = [f"{bot.name} ({bot.id})"]
    if bot.username:
        lines[0] += f" @{bot.username}"
    if bot.bio:
        lines.append(bot.bio)
    if bot.skills:
        lines.append("Skills:")
        for skill in bot.skills:
            name = skill.custom_name or skill.workflow_name or skill.workflow_id
            line = f"- {name} (glif {skill.workflow_id})"
            if skill.custom_description:
                line += f": {skill.custom_description}"
            lines.append(line)
    return "\n".join(lines)
