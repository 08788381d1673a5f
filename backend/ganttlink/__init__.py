"""ganttlink - dependency constraint resolution for Gantt chart drags."""
