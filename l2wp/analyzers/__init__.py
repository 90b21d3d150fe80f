"""Archive analysis: validation, project model recovery, style extraction."""
