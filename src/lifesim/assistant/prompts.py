"""System prompts and the app-state summary sent to the model."""

from __future__ import annotations

from typing import Any

_OPERATIONS_DOC = """\
### CREATE_GOAL
{"type": "CREATE_GOAL", "payload": {"title": "string (required)", "description": "string", "targetDate": "YYYY-MM-DD"}}

### UPDATE_GOAL
{"type": "UPDATE_GOAL", "payload": {"goalId": "existing goal id (required)", "title": "string", "description": "string", "targetDate": "YYYY-MM-DD", "isActive": true}}

### DELETE_GOAL
{"type": "DELETE_GOAL", "payload": {"goalId": "existing goal id (required)"}}

### CREATE_TASK
{"type": "CREATE_TASK", "payload": {"title": "string (required)", "description": "string", "type": "MAIN | SIDE | DAILY | MAINTENANCE (default SIDE)", "status": "BACKLOG | PLANNED | IN_PROGRESS | DONE (default PLANNED)", "goalArcId": "existing goal id", "estimatedMinutes": 30, "dueDate": "YYYY-MM-DD"}}

### UPDATE_TASK
{"type": "UPDATE_TASK", "payload": {"taskId": "existing task id (required)", "title": "string", "description": "string", "type": "MAIN | SIDE | DAILY | MAINTENANCE", "status": "BACKLOG | PLANNED | IN_PROGRESS | DONE", "estimatedMinutes": 30, "dueDate": "YYYY-MM-DD"}}

### DELETE_TASK
{"type": "DELETE_TASK", "payload": {"taskId": "existing task id (required)"}}

### LINK_TASK_TO_GOAL
{"type": "LINK_TASK_TO_GOAL", "payload": {"taskId": "existing task id (required)", "goalArcId": "existing goal id, or null to unlink"}}

### SUGGEST_TODAY_TASKS
{"type": "SUGGEST_TODAY_TASKS", "payload": {"taskIds": ["existing task ids"], "reason": "why these"}}
"""

SYSTEM_PROMPT = (
    """\
You are the assistant inside a "life sim" task tracker. You help the user
organize goals, tasks and daily plans, in a warm, concise, encouraging tone.

In this app:
- GoalArcs are long-running goals ("Learn Japanese", "Launch my startup").
- Tasks are actionable items that can be linked to a GoalArc.
- Sessions track focused work time on tasks.

## Response format
Always answer with a single JSON object, nothing else:
{"assistantMessage": "your reply to the user", "operations": [ ... ]}
Use an empty operations array when the user is just chatting.

## Available operations
"""
    + _OPERATIONS_DOC
    + """
## Rules
1. Always return valid JSON with "assistantMessage" and "operations".
2. Only use the operation types listed above.
3. Reference existing goals and tasks by the exact ids from the app state.
4. Keep batches small and ask for clarification when the request is unclear.
"""
)

IMPORT_SYSTEM_PROMPT = """\
You organize raw notes for a "life sim" task tracker. Turn the user's brain
dump, lists or notes into GoalArcs (large goals) and Tasks (actionable items).

## Response format
Always answer with a single JSON object, nothing else:
{"summary": "what you extracted", "operations": [ ... ]}

Only CREATE_GOAL and CREATE_TASK operations are allowed:
{"type": "CREATE_GOAL", "payload": {"title": "string (required)", "description": "string", "targetDate": "YYYY-MM-DD"}}
{"type": "CREATE_TASK", "payload": {"title": "string (required)", "description": "string", "type": "MAIN | SIDE | DAILY | MAINTENANCE", "status": "BACKLOG | PLANNED", "goalArcId": "TEMP_GOAL_1", "estimatedMinutes": 15, "dueDate": "YYYY-MM-DD"}}

## Linking tasks to goals
Goals created in this batch are referenced as TEMP_GOAL_1, TEMP_GOAL_2, ...
in the order their CREATE_GOAL operations appear. The app replaces these
placeholders with real ids after creating the goals.

## Task types
- MAIN: core work that moves a goal forward
- SIDE: supporting or nice-to-have work
- DAILY: recurring habits
- MAINTENANCE: chores, admin, cleanup

## Rules
1. Group related tasks under a goal; leave goalArcId out for standalone tasks.
2. Keep titles short; extract dates and estimate durations when the text allows.
3. Default to PLANNED unless the user says backlog.
4. Do not create overlapping goals; consolidate them.
"""

HISTORY_TURNS = 10


def _records(items: Any) -> list[dict[str, Any]]:
    if not isinstance(items, list):
        return []
    return [item for item in items if isinstance(item, dict)]


def build_context_message(context: dict[str, Any] | None) -> str:
    """Markdown summary of the goals, tasks and today's stats in a request."""
    context = context or {}
    goals = _records(context.get("goals"))
    tasks = _records(context.get("tasks"))
    stats = context.get("todayStats")

    lines = ["## Current App State", ""]
    if goals:
        lines.append("### Goals:")
        for g in goals:
            line = f'- ID: "{g.get("id")}" | Title: "{g.get("title")}"'
            if g.get("description"):
                line += f' | Description: "{g["description"]}"'
            if g.get("targetDate"):
                line += f" | Target: {g['targetDate']}"
            line += f" | Active: {str(g.get('isActive', True)).lower()}"
            lines.append(line)
    else:
        lines.append("### Goals: None yet")
    lines.append("")

    if tasks:
        lines.append("### Tasks:")
        for t in tasks:
            line = (
                f'- ID: "{t.get("id")}" | Title: "{t.get("title")}"'
                f" | Type: {t.get('type')} | Status: {t.get('status')}"
            )
            if t.get("goalArcId"):
                line += f' | Linked to goal: "{t["goalArcId"]}"'
            lines.append(line)
    else:
        lines.append("### Tasks: None yet")

    if isinstance(stats, dict):
        lines.extend([
            "",
            "### Today's Progress:",
            f"- Focus time: {stats.get('focusMinutes', 0)} minutes",
            f"- Tasks completed: {stats.get('tasksCompleted', 0)}",
        ])
    return "\n".join(lines) + "\n"


def build_chat_messages(
    message: str,
    history: list[dict[str, Any]] | None,
    context: dict[str, Any] | None,
) -> list[dict[str, str]]:
    """System prompt, app state, the last turns of history, then the user message."""
    messages = [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "system", "content": build_context_message(context)},
    ]
    for turn in (history or [])[-HISTORY_TURNS:]:
        if not isinstance(turn, dict):
            continue
        role = turn.get("role")
        content = turn.get("content")
        if role in ("user", "assistant") and isinstance(content, str):
            messages.append({"role": role, "content": content})
    messages.append({"role": "user", "content": message})
    return messages


def build_import_messages(raw_data: str) -> list[dict[str, str]]:
    return [
        {"role": "system", "content": IMPORT_SYSTEM_PROMPT},
        {"role": "user", "content": f"Parse and organize this data:\n\n{raw_data}"},
    ]


def context_from_store(store) -> dict[str, Any]:
    """Request-shaped context (camelCase) built from a local store."""
    return {
        "goals": [g.to_json_dict() for g in store.goals.list()],
        "tasks": [t.to_json_dict() for t in store.tasks.list()],
        "todayStats": store.today_stats().to_json_dict(),
    }
