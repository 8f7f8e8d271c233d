"""HTTP API for the research agent."""
