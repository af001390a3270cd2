"""pyfdhelm: face elements for the Fourier-decomposed axisymmetric Helmholtz equation."""
__version__ = "0.1.0"
