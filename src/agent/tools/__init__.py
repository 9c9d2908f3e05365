"""agent.tools - Tool schema types, registry, validation, orchestration and the tools."""
