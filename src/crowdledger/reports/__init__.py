from .listing import donor_lines, project_lines

__all__ = ["donor_lines", "project_lines"]
