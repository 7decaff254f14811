"""covreport: JaCoCo CSV coverage to Markdown, with optional PR comments."""

__version__ = "0.1.0"
