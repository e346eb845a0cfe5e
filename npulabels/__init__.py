"""NPU device labels and a loop that keeps a node feature file in sync."""

__version__ = "0.1.0"
__all__ = ["discovery", "npu"]