# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
BatchNet Error Hierarchy

Provides error types for serving sessions with:
- Clear error categorization (each error carries a StatusCode)
- Helpful error messages with suggestions
- Context information for debugging

Error Categories:
- BatchNetError: Base class for all BatchNet errors
- InvalidArgumentError: Malformed or unsupported request (recoverable)
- TopologyError: Inconsistent net topology or engine state (fatal)
- WeightShapeError: Trained parameter does not fit the topology (fatal)
- UnsupportedLayerError: Layer type unknown to the engine (fatal)
- ConfigurationError: Invalid session options
"""

from typing import Optional

from .core.types import StatusCode


class BatchNetError(Exception):
    """
    Base class for all BatchNet errors.

    Provides consistent error formatting and context tracking.

    Attributes:
        message: Human-readable error message
        code: Error kind
        suggestions: List of suggestions to fix the error
        context: Optional context dictionary for debugging
    """

    code: StatusCode = StatusCode.InternalError

    def __init__(
        self,
        message: str,
        suggestions: Optional[list[str]] = None,
        context: Optional[dict] = None,
    ):
        self.message = message
        self.suggestions = suggestions or []
        self.context = context or {}

        full_message = self._format_message()
        super().__init__(full_message)

    def _format_message(self) -> str:
        """Format the error message with suggestions."""
        lines = [self.message]

        if self.suggestions:
            lines.append("")
            lines.append("Suggestions:")
            for i, suggestion in enumerate(self.suggestions, 1):
                lines.append(f"  {i}. {suggestion}")

        if self.context:
            lines.append("")
            lines.append("Context:")
            for key, value in self.context.items():
                lines.append(f"  {key}: {value}")

        return "\n".join(lines)


class InvalidArgumentError(BatchNetError):
    """
    Malformed or unsupported request.

    Raised when:
    - target node selection is requested
    - the input count is wrong
    - the batch size cannot be determined
    - an input or output name is unknown
    - batch sizes disagree across inputs
    - a non-positive capacity is requested
    - a weight file cannot be read
    """

    code = StatusCode.InvalidArgument

    def __init__(
        self,
        message: str,
        parameter: Optional[str] = None,
        expected: Optional[str] = None,
        received: Optional[str] = None,
        suggestions: Optional[list[str]] = None,
    ):
        self.parameter = parameter

        context = {}
        if parameter:
            context["parameter"] = parameter
        if expected:
            context["expected"] = expected
        if received:
            context["received"] = received

        super().__init__(
            message=f"Invalid argument: {message}",
            suggestions=suggestions,
            context=context,
        )


class TopologyError(BatchNetError):
    """
    The loaded net is internally inconsistent.

    Raised when:
    - a declared input/output index is outside the blob list
    - a node references a tensor that does not exist
    - shape propagation fails inside the engine

    These errors abort construction or leave the session unusable.
    They are never converted into request errors.
    """

    code = StatusCode.InvalidGraph

    def __init__(
        self,
        message: str,
        model_name: Optional[str] = None,
        node_name: Optional[str] = None,
        suggestions: Optional[list[str]] = None,
    ):
        context = {}
        if model_name:
            context["model_name"] = model_name
        if node_name:
            context["node_name"] = node_name

        default_suggestions = [
            "Check that every node input is a graph input, node output or constant",
            "Verify the declared input shapes match the layer parameters",
        ]

        super().__init__(
            message=f"Topology error: {message}",
            suggestions=suggestions or default_suggestions,
            context=context,
        )


class WeightShapeError(TopologyError):
    """A trained parameter's shape differs from the topology's parameter."""

    def __init__(
        self,
        param_name: str,
        expected_shape: tuple,
        actual_shape: tuple,
        model_name: Optional[str] = None,
    ):
        self.param_name = param_name
        self.expected_shape = expected_shape
        self.actual_shape = actual_shape

        super().__init__(
            f"parameter '{param_name}' has shape {actual_shape}, "
            f"net expects {expected_shape}",
            model_name=model_name,
            suggestions=[
                "Make sure the weight file was trained for this topology",
                "Re-export the parameters from the matching model version",
            ],
        )


class UnsupportedLayerError(TopologyError):
    """Layer type not implemented by the engine."""

    def __init__(
        self,
        op_type: str,
        node_name: Optional[str] = None,
        supported_ops: Optional[list[str]] = None,
    ):
        self.op_type = op_type
        self.supported_ops = supported_ops or []

        suggestions = [
            f"Replace '{op_type}' with a supported layer",
            "Register a kernel with LayerRegistry.register",
        ]
        if supported_ops:
            similar = self._find_similar_ops(op_type, supported_ops)
            if similar:
                suggestions.insert(0, f"Try using: {', '.join(similar)}")

        super().__init__(
            f"layer type '{op_type}' is not supported",
            node_name=node_name,
            suggestions=suggestions,
        )

    @staticmethod
    def _find_similar_ops(op_type: str, supported_ops: list[str]) -> list[str]:
        """Find similar supported layer types."""
        op_lower = op_type.lower()
        similar = []
        for op in supported_ops:
            if op_lower in op.lower() or op.lower() in op_lower:
                similar.append(op)
        return similar[:3]


class ConfigurationError(BatchNetError):
    """
    Session configuration error.

    Raised when SessionOptions or BatchingParameters hold invalid values.
    """

    code = StatusCode.InvalidArgument

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[str] = None,
    ):
        context = {}
        if config_key:
            context["config_key"] = config_key
        if config_value is not None:
            context["config_value"] = str(config_value)

        suggestions = [
            "Check the session options",
            "Review the batching parameter constraints",
        ]

        super().__init__(
            message=f"Configuration error: {message}",
            suggestions=suggestions,
            context=context,
        )


def format_shape_mismatch(
    expected_shape: tuple,
    actual_shape: tuple,
    tensor_name: Optional[str] = None,
) -> InvalidArgumentError:
    """Create an InvalidArgumentError for a shape mismatch."""
    msg = f"shape mismatch: expected {expected_shape}, got {actual_shape}"
    return InvalidArgumentError(
        message=msg,
        parameter=tensor_name or "tensor",
        expected=str(expected_shape),
        received=str(actual_shape),
    )
