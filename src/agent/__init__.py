"""
agent - Conversation orchestration layer.

Contains the tool registry, validator and orchestrator, the tools
themselves, the keyword intent engine and the per-turn conversation agent.
Depends on domain/ only; infrastructure is injected through domain ports.
"""
