"""
Named color palettes.

Each palette selects fill/stroke per task status, for critical-path tasks,
for dependencies and milestones, plus the chart chrome.
"""

from dataclasses import dataclass

from gantt.exceptions import ValidationError


@dataclass(frozen=True)
class Palette:
    background: str
    header_background: str
    sidebar_background: str
    timeline_background: str
    row_background: str
    row_background_alt: str
    border: str
    grid_color: str
    text_color: str
    default_task_color: str
    default_task_border: str
    todo_color: str
    todo_border: str
    in_progress_color: str
    in_progress_border: str
    completed_color: str
    completed_border: str
    blocked_color: str
    blocked_border: str
    critical_task_color: str
    critical_task_border: str
    dependency_color: str
    milestone_color: str
    milestone_border: str
    selection_color: str = "#3b82f6"
    link_preview_color: str = "#f59e0b"
    font_family: str = "Inter, system-ui, sans-serif"
    font_size: float = 14

    def status_fill(self, status: str) -> str:
        return {
            "todo": self.todo_color,
            "in_progress": self.in_progress_color,
            "completed": self.completed_color,
            "blocked": self.blocked_color,
        }.get(status, self.default_task_color)

    def status_stroke(self, status: str) -> str:
        return {
            "todo": self.todo_border,
            "in_progress": self.in_progress_border,
            "completed": self.completed_border,
            "blocked": self.blocked_border,
        }.get(status, self.default_task_border)


THEMES: dict[str, Palette] = {
    "default": Palette(
        background="#ffffff",
        header_background="#f8fafc",
        sidebar_background="#f1f5f9",
        timeline_background="#ffffff",
        row_background="#ffffff",
        row_background_alt="#f8fafc",
        border="#e2e8f0",
        grid_color="#cbd5e1",
        text_color="#1e293b",
        default_task_color="#3b82f6",
        default_task_border="#1d4ed8",
        todo_color="#6b7280",
        todo_border="#4b5563",
        in_progress_color="#3b82f6",
        in_progress_border="#1d4ed8",
        completed_color="#10b981",
        completed_border="#059669",
        blocked_color="#ef4444",
        blocked_border="#dc2626",
        critical_task_color="#f59e0b",
        critical_task_border="#d97706",
        dependency_color="#6b7280",
        milestone_color="#8b5cf6",
        milestone_border="#7c3aed",
    ),
    "dark": Palette(
        background="#1e293b",
        header_background="#334155",
        sidebar_background="#475569",
        timeline_background="#1e293b",
        row_background="#1e293b",
        row_background_alt="#334155",
        border="#475569",
        grid_color="#64748b",
        text_color="#f1f5f9",
        default_task_color="#3b82f6",
        default_task_border="#60a5fa",
        todo_color="#6b7280",
        todo_border="#9ca3af",
        in_progress_color="#3b82f6",
        in_progress_border="#60a5fa",
        completed_color="#10b981",
        completed_border="#34d399",
        blocked_color="#ef4444",
        blocked_border="#f87171",
        critical_task_color="#f59e0b",
        critical_task_border="#fbbf24",
        dependency_color="#9ca3af",
        milestone_color="#8b5cf6",
        milestone_border="#a78bfa",
    ),
    "colorful": Palette(
        background="#ffffff",
        header_background="#f0f9ff",
        sidebar_background="#e0f2fe",
        timeline_background="#ffffff",
        row_background="#ffffff",
        row_background_alt="#f8fafc",
        border="#0ea5e9",
        grid_color="#bae6fd",
        text_color="#0c4a6e",
        default_task_color="#0ea5e9",
        default_task_border="#0284c7",
        todo_color="#6b7280",
        todo_border="#4b5563",
        in_progress_color="#f59e0b",
        in_progress_border="#d97706",
        completed_color="#10b981",
        completed_border="#059669",
        blocked_color="#ef4444",
        blocked_border="#dc2626",
        critical_task_color="#ec4899",
        critical_task_border="#db2777",
        dependency_color="#8b5cf6",
        milestone_color="#f59e0b",
        milestone_border="#d97706",
    ),
}


def get_theme(name: str) -> Palette:
    try:
        return THEMES[name]
    except KeyError:
        raise ValidationError(
            f"Unknown theme '{name}'",
            details=[{"loc": ["theme"], "msg": f"expected one of {sorted(THEMES)}", "type": "value_error"}],
        ) from None
