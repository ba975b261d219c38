# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Layer Implementations

Layers are organized by category:
- activation_layers: Relu, Sigmoid, Tanh, Softmax
- math_layers: Linear (InnerProduct), MatMul, Add, Mul
- conv_layers: Conv, MaxPool, AveragePool, GlobalAveragePool
- shape_layers: Flatten, Reshape, Concat, Identity (Dropout)
"""

# Import all layer modules to register them
from . import activation_layers
from . import math_layers
from . import conv_layers
from . import shape_layers

__all__ = [
    "activation_layers",
    "math_layers",
    "conv_layers",
    "shape_layers",
]
