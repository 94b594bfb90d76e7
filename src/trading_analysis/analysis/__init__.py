"""Cash-flow analysis, performance criteria, and reports."""
