"""Export loaded sessions to Markdown and JSON formats."""

import json

from .core import ContentBlock, Message, Role, Session, TextBlock, ToolCall


def session_to_markdown(session: Session) -> str:
    """Export a session and its messages as clean Markdown."""
    stats = session.stats
    lines = [f"# {session.project_name}", ""]

    lines.append(f"**Project:** {session.project_path}")
    lines.append(f"**Session:** {session.id}")
    lines.append(f"**Turns:** {stats.turn_count}")
    lines.append(f"**Tool calls:** {stats.tool_call_count}")
    if stats.error_count:
        lines.append(f"**Errors:** {stats.error_count}")
    if stats.formatted_duration:
        lines.append(f"**Duration:** {stats.formatted_duration}")
    lines.extend(["", "---", ""])

    for msg in session.messages:
        role_label = "Human" if msg.role is Role.HUMAN else "Assistant"
        ts = f" ({msg.timestamp.strftime('%Y-%m-%d %H:%M')})"
        lines.append(f"## {role_label}{ts}")
        lines.append("")
        for block in msg.content:
            lines.append(_block_to_markdown(block))
            lines.append("")
        lines.extend(["---", ""])

    return "\n".join(lines)


def session_to_json(session: Session) -> str:
    """Export a session, its stats and its messages as structured JSON."""
    stats = session.stats
    data = {
        "session": {
            "id": session.id,
            "project_path": session.project_path,
            "project_name": session.project_name,
            "message_count": len(session.messages),
        },
        "stats": {
            "human_message_count": stats.human_message_count,
            "agent_message_count": stats.agent_message_count,
            "turn_count": stats.turn_count,
            "tool_call_count": stats.tool_call_count,
            "tool_calls_by_name": stats.tool_calls_by_name,
            "error_count": stats.error_count,
            "duration_seconds": stats.duration.total_seconds() if stats.duration is not None else None,
        },
        "messages": [_message_to_dict(msg) for msg in session.messages],
    }
    return json.dumps(data, indent=2, ensure_ascii=False)


def _block_to_markdown(block: ContentBlock) -> str:
    if isinstance(block, TextBlock):
        return block.text
    if isinstance(block, ToolCall):
        args = json.dumps(block.input, indent=2, ensure_ascii=False)
        return f"**Tool call:** `{block.name}`\n\n```json\n{args}\n```"
    label = "Tool error" if block.is_error else "Tool result"
    return f"**{label}:**\n\n```text\n{block.content}\n```"


def _block_to_dict(block: ContentBlock) -> dict:
    if isinstance(block, TextBlock):
        return {"type": "text", "text": block.text}
    if isinstance(block, ToolCall):
        return {"type": "tool_use", "id": block.id, "name": block.name, "input": block.input}
    return {
        "type": "tool_result",
        "id": block.id,
        "tool_call_id": block.tool_call_id,
        "content": block.content,
        "is_error": block.is_error,
    }


def _message_to_dict(msg: Message) -> dict:
    return {
        "id": msg.id,
        "role": msg.role.value,
        "timestamp": msg.timestamp.isoformat(),
        "parent_id": msg.parent_id,
        "content": [_block_to_dict(block) for block in msg.content],
    }
