from .cli import app

app(prog_name="bulk-jira-from-yaml")
