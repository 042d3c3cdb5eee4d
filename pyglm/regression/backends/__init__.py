"""
Regression backends.

Available backends:
    CPULUBackend: least squares via the normal equations and LU
    CPUQRBackend: least squares via Householder QR
    CPUIRLSBackend: GLM fitting by IRLS
    CPUNewtonBackend: Newton-Raphson probability model
"""

from pyglm.regression.backends.cpu import CPULUBackend, CPUQRBackend
from pyglm.regression.backends.cpu_glm import CPUIRLSBackend, CPUNewtonBackend

__all__ = [
    "CPULUBackend",
    "CPUQRBackend",
    "CPUIRLSBackend",
    "CPUNewtonBackend",
]
