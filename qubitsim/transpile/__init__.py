"""Circuit analysis helpers."""

from .analysis import GateCountSummary, summarize_gate_counts

__all__ = ["GateCountSummary", "summarize_gate_counts"]
