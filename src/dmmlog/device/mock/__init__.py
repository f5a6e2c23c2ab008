from .mock_dmm import MockDMM

__all__ = ["MockDMM"]
