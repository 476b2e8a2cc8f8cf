"""
Error taxonomy for WWL computations

Every error is raised before any partial matrix is produced and carries the
offending graph / pair indices so the caller can diagnose it.
"""


class WWLError(ValueError):
    """Base class for all WWL errors."""


class EmptyInput(WWLError):
    def __init__(self, message="No graphs supplied"):
        super().__init__(message)


class DimensionMismatch(WWLError):
    """Feature matrix shape does not match the graphs it describes."""

    def __init__(self, constraint, expected, actual, message=None):
        self.constraint = constraint
        self.expected = expected
        self.actual = actual
        if message is None:
            message = f"Feature matrix violates '{constraint}': expected {expected}, got {actual}"
        super().__init__(message)


class MixedModeNotAllowed(WWLError):
    """A graph mixes labels and features, or lacks what the mode requires."""

    def __init__(self, graph_index, reason, node_index=None):
        self.graph_index = graph_index
        self.node_index = node_index
        self.reason = reason
        where = f"graph {graph_index}"
        if node_index is not None:
            where += f", node {node_index}"
        super().__init__(f"{where}: {reason}")


class InvalidGraph(WWLError):
    def __init__(self, graph_index, reason):
        self.graph_index = graph_index
        self.reason = reason
        prefix = f"graph {graph_index}: " if graph_index is not None else ""
        super().__init__(f"{prefix}{reason}")


class InvalidFeatures(WWLError):
    def __init__(self, reason, graph_index=None):
        self.graph_index = graph_index
        self.reason = reason
        prefix = f"graph {graph_index}: " if graph_index is not None else ""
        super().__init__(f"{prefix}{reason}")


class SolverDivergence(WWLError):
    """A transport solver stopped before reaching a valid solution."""

    def __init__(self, pair, solver, detail):
        self.pair = pair
        self.solver = solver
        self.detail = detail
        super().__init__(f"{solver} solver failed to converge for graphs {pair}: {detail}")

    def __reduce__(self):
        # rebuilt from its fields when raised inside a worker process
        return type(self), (self.pair, self.solver, self.detail)


class SolverTimeout(WWLError):
    def __init__(self, pair, timeout):
        self.pair = pair
        self.timeout = timeout
        super().__init__(f"Exact transport for graphs {pair} exceeded {timeout:g}s")
