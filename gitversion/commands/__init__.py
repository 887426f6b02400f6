"""Click commands for the gitversion CLI."""
