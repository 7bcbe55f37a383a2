"""Aggregate statistics over a parsed message sequence."""

from collections.abc import Sequence

from .core import Message, Role, SessionStats, ToolCall, ToolResult


def compute_stats(messages: Sequence[Message]) -> SessionStats:
    """Derive a SessionStats snapshot from ``messages``.

    Turn count is the number of human messages. Duration is the plain
    difference between the last and first timestamps, so out-of-order
    timestamps produce a negative value; it is None with fewer than two
    messages.
    """
    human = 0
    agent = 0
    tool_calls = 0
    tools_by_name: dict[str, int] = {}
    errors = 0

    for message in messages:
        if message.role is Role.HUMAN:
            human += 1
        else:
            agent += 1

        for block in message.content:
            if isinstance(block, ToolCall):
                tool_calls += 1
                tools_by_name[block.name] = tools_by_name.get(block.name, 0) + 1
            elif isinstance(block, ToolResult) and block.is_error:
                errors += 1

    duration = None
    if len(messages) >= 2:
        duration = messages[-1].timestamp - messages[0].timestamp

    return SessionStats(
        human_message_count=human,
        agent_message_count=agent,
        turn_count=human,
        tool_call_count=tool_calls,
        tool_calls_by_name=tools_by_name,
        error_count=errors,
        duration=duration,
    )
