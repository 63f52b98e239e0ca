"""Command line entry points for NudgeNet."""
