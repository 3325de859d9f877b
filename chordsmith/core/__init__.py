"""Core utilities: LLM client and chord-chart post-processing."""
